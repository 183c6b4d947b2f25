"""Customer repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for the Customer aggregate."""

    @abstractmethod
    def get_by_user(self, user: Any) -> Optional[Customer]:
        """Retrieve the customer linked to a Django user."""

    @abstractmethod
    def get_or_create_for_user(self, user: Any) -> Customer:
        """Return the user's customer, creating it on first use."""
