"""Cart and CartItem models.

Business rules implemented:
- One cart per customer, created lazily on the first added line.
- A product appears at most once per cart; adding it again merges
  quantities.
- Line quantity is between 1 and ``CART_MAX_LINE_QUANTITY`` (enforced at
  service layer; the lower bound is also a database constraint).
- ``total_items`` and ``total_amount`` are derived from the lines on every
  read and never persisted.
- After a successful checkout the cart is emptied, not deleted.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel


class Cart(BaseModel):
    """Cart aggregate root.  ``customer`` never changes after creation."""

    customer = models.OneToOneField(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="cart",
    )
    is_active = models.BooleanField(default=True)
    last_modified_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "carts"

    @property
    def lines(self) -> list[CartItem]:
        return list(self.items.all())

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_amount(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))

    def touch(self) -> None:
        self.last_modified_at = timezone.now()

    def __str__(self) -> str:
        return f"cart:{self.customer_id}"


class CartItem(BaseModel):
    """One product line.  ``unit_price`` is the catalog price when the line was written."""

    cart = models.ForeignKey(
        "carts.Cart",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "cart_items"
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product"],
                name="cart_items_unique_product",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="cart_items_quantity_positive",
            ),
        ]

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_price

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity}"
