"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order aggregate needs:
atomic creation with items, row locking for status changes, and the
append-only status history.

The Service Layer depends exclusively on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem children and OrderStatusHistory
    records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any], items: List[Dict[str, Any]]) -> Order:
        """Insert an order and its items.

        ``data`` holds the order columns including ``order_number``.
        Raises ``OrderNumberConflict`` if the number is already taken.
        """

    @abstractmethod
    def order_number_exists(self, order_number: str) -> bool:
        """Return ``True`` if *order_number* is already allocated."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        customer_id: Optional[UUID] = None,
    ) -> QuerySet[Order]:
        """Filtered, lazily evaluated orders, newest first.

        *customer_id* restricts the result to one customer's orders.
        """

    @abstractmethod
    def add_history(
        self,
        order: Order,
        new_status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> OrderStatusHistory:
        """Append a record to the order's audit trail."""
