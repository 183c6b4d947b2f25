"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Status transitions follow ``VALID_TRANSITIONS`` (checked by the service).
- Every status write appends a history record with an increasing
  ``sequence``; the last record's ``new_status`` equals ``Order.status``.
- ``order_number`` is generated once, before the first insert.
- Totals are computed once at creation by the order service and stored;
  ``total`` and ``refund_amount`` can never be negative (check constraints).
- OrderItem snapshots product name, price and prescription flag.
- Customer and product FKs use PROTECT to preserve financial history.
  Orders are never deleted.
"""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    CANCELLABLE_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from shared.domain.events import DomainEventMixin

MONEY = {"max_digits": 12, "decimal_places": 2}


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``order_number`` is the human-readable identifier
    (``ORD-YYYYMMDD-XXXXXX``); the UUIDv7 ``id`` is used for all internal
    references and API look-ups.  Addresses are stored as validated JSON
    documents (see ``AddressDTO``).
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )

    shipping_address = models.JSONField()
    billing_address = models.JSONField()

    subtotal = models.DecimalField(**MONEY, default=Decimal("0.00"))
    tax = models.DecimalField(**MONEY, default=Decimal("0.00"))
    shipping = models.DecimalField(**MONEY, default=Decimal("0.00"))
    discount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    total = models.DecimalField(**MONEY, default=Decimal("0.00"))

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    requires_prescription = models.BooleanField(default=False)
    customer_notes = models.TextField(blank=True, default="")
    admin_notes = models.TextField(blank=True, default="")

    tracking_number = models.CharField(max_length=100, blank=True, default="")
    courier = models.CharField(max_length=100, blank=True, default="")
    estimated_delivery_date = models.DateTimeField(null=True, blank=True)
    actual_delivery_date = models.DateTimeField(null=True, blank=True)

    cancellation_reason = models.TextField(blank=True, default="")
    refund_amount = models.DecimalField(**MONEY, default=Decimal("0.00"))

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total__gte=0),
                name="orders_total_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(refund_amount__gte=0),
                name="orders_refund_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in CANCELLABLE_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    @property
    def customer_name(self) -> str:
        address = self.shipping_address or {}
        return f"{address.get('first_name', '')} {address.get('last_name', '')}".strip()

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Immutable order line.

    ``product_name``, ``unit_price`` and ``prescription_required`` are
    snapshots taken from the catalog at checkout; later catalog edits
    never change a placed order.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal = models.DecimalField(**MONEY)
    prescription_required = models.BooleanField(default=False)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "order_items"
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} (${self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``actor`` is nullable: ``None`` means the change was performed by the
    system.  ``sequence`` is unique per order and strictly increasing.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    sequence = models.PositiveIntegerField()
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "sequence"],
                name="osh_order_sequence_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} #{self.sequence}: {self.old_status} -> {self.new_status}"
