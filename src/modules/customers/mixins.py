"""View mixin resolving the authenticated user into a ``RequesterDTO``."""

from __future__ import annotations

from typing import Optional

from modules.customers.dtos import RequesterDTO
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.services import CustomerService


class RequesterMixin:
    """Adds ``get_requester()`` to DRF views.  Resolved once per request."""

    _requester: Optional[RequesterDTO] = None

    def get_requester(self) -> RequesterDTO:
        if self._requester is None:
            service = CustomerService(CustomerDjangoRepository())
            self._requester = service.resolve_requester(self.request.user)
        return self._requester
