"""Customer service layer.

Bridges the authentication collaborator and the ordering core: an
authenticated Django user becomes a ``RequesterDTO`` carrying the
customer id and the admin flag.  Also owns customer deactivation, which
retires the customer's cart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol
from uuid import UUID

import structlog
from django.db import transaction

from modules.customers.dtos import RequesterDTO
from modules.customers.exceptions import CustomerNotFound, InactiveCustomer

if TYPE_CHECKING:
    from modules.customers.models import Customer
    from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CartRetirer(Protocol):
    def retire(self, customer_id: UUID) -> None: ...


class CustomerService:
    """Application service for Customer use-cases."""

    def __init__(
        self,
        repository: ICustomerRepository,
        cart_retirer: Optional[CartRetirer] = None,
    ) -> None:
        self._repo = repository
        self._cart_retirer = cart_retirer

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def resolve_requester(self, user: Any) -> RequesterDTO:
        """Map an authenticated Django user to the caller identity."""
        customer = self._repo.get_or_create_for_user(user)
        return RequesterDTO(
            customer_id=customer.id,
            user_id=user.pk,
            is_admin=bool(getattr(user, "is_staff", False)),
        )

    def get_customer(self, customer_id: UUID) -> Customer:
        customer = self._repo.get_by_id(str(customer_id))
        if not customer:
            raise CustomerNotFound(
                f"Customer {customer_id} not found.", customer_id=customer_id
            )
        return customer

    def get_active_customer(self, customer_id: UUID) -> Customer:
        """Return the customer or fail if it is missing or deactivated."""
        customer = self.get_customer(customer_id)
        if not customer.is_active:
            raise InactiveCustomer(
                f"Customer {customer_id} is inactive.", customer_id=customer_id
            )
        return customer

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def deactivate_customer(self, customer_id: UUID) -> Customer:
        """Deactivate a customer and retire their cart."""
        customer = self.get_customer(customer_id)
        if not customer.is_active:
            return customer

        customer.is_active = False
        self._repo.save(customer)
        if self._cart_retirer is not None:
            self._cart_retirer.retire(customer.id)

        logger.info("customer.deactivated", customer_id=str(customer.id))
        return customer
