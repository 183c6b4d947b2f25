"""Cart repository interface.

Extends ``IRepository[Cart]`` with the line-level operations the cart
service needs.  Every mutating use-case starts with ``get_for_update`` so
that concurrent edits of the same cart are serialized on the cart row.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.carts.models import Cart, CartItem


class ICartRepository(IRepository["Cart"]):
    """Repository contract for the Cart aggregate."""

    @abstractmethod
    def get_for_customer(self, customer_id: UUID) -> Optional[Cart]:
        """Retrieve the customer's cart with its lines, or ``None``."""

    @abstractmethod
    def get_for_update(self, customer_id: UUID, create: bool = False) -> Optional[Cart]:
        """Retrieve the customer's cart with a row-level lock.

        With ``create=True`` a missing cart is created first.
        """

    @abstractmethod
    def get_line(self, cart: Cart, product_id: UUID) -> Optional[CartItem]:
        """Retrieve the line for *product_id*, or ``None``."""

    @abstractmethod
    def add_line(
        self, cart: Cart, product_id: UUID, quantity: int, unit_price: Decimal
    ) -> CartItem:
        """Append a new line after the existing ones."""

    @abstractmethod
    def save_line(self, line: CartItem) -> CartItem:
        """Persist quantity and price changes of an existing line."""

    @abstractmethod
    def delete_line(self, line: CartItem) -> None:
        """Remove a single line."""

    @abstractmethod
    def clear_lines(self, cart: Cart) -> int:
        """Remove every line and return how many were removed."""
