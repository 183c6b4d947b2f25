"""Cart DTOs.

- ``CartLineSnapshot`` / ``CartSnapshot``: frozen read model handed to the
  API and to checkout.  Reading a snapshot never mutates the cart.
- ``CartIssue`` / ``CartValidationReport``: output of ``validate_cart``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.carts.models import Cart, CartItem


class CartLineSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str = ""
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    @classmethod
    def from_entity(cls, line: CartItem) -> CartLineSnapshot:
        return cls(
            product_id=line.product_id,
            product_name=line.product.name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            subtotal=line.subtotal,
        )


class CartSnapshot(BaseModel):
    """Immutable copy of a cart: lines in insertion order plus derived totals."""

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    cart_id: Optional[UUID] = None
    is_active: bool = True
    lines: Tuple[CartLineSnapshot, ...] = ()
    total_items: int = 0
    total_amount: Decimal = Decimal("0.00")
    last_modified_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @classmethod
    def empty(cls, customer_id: UUID) -> CartSnapshot:
        return cls(customer_id=customer_id)

    @classmethod
    def from_entity(cls, cart: Cart) -> CartSnapshot:
        lines = tuple(CartLineSnapshot.from_entity(line) for line in cart.lines)
        return cls(
            customer_id=cart.customer_id,
            cart_id=cart.id,
            is_active=cart.is_active,
            lines=lines,
            total_items=sum(line.quantity for line in lines),
            total_amount=sum((line.subtotal for line in lines), Decimal("0.00")),
            last_modified_at=cart.last_modified_at,
        )


class CartIssue(BaseModel):
    """A single problem found on a cart line during validation."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str
    kind: str
    detail: str
    requested_quantity: Optional[int] = None
    available_quantity: Optional[int] = None
    old_price: Optional[Decimal] = None
    new_price: Optional[Decimal] = None


class CartValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    cart: CartSnapshot
    is_valid: bool
    valid_product_ids: Tuple[UUID, ...] = ()
    issues: Tuple[CartIssue, ...] = ()

    @property
    def summary(self) -> dict:
        return {
            "total_items": self.cart.total_items,
            "total_amount": self.cart.total_amount,
            "valid_items_count": len(self.valid_product_ids),
            "issue_count": len(self.issues),
        }
