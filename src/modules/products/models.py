"""Product model: the catalog entry the ordering core reads and reserves.

Business rules implemented:
- SKU must be unique in the system.
- Inactive products cannot be added to carts or ordered (enforced at
  service layer).
- Price must be greater than zero.
- Stock quantity can never go negative (database check constraint); it is
  changed by the ordering core only through the inventory ledger.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Product(SoftDeleteModel):
    """Product aggregate root.

    ``sku`` is normalised to uppercase on save to prevent visual duplicates
    (e.g. "amx-500" vs "AMX-500").
    """

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    generic_name = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=10)
    max_stock = models.PositiveIntegerField(default=1000)
    prescription_required = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
    )

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip().upper()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        if (
            self.min_stock is not None
            and self.max_stock is not None
            and self.min_stock > self.max_stock
        ):
            raise ValidationError(
                {"min_stock": "Minimum stock cannot exceed maximum stock."}
            )

    # ------------------------------------------------------------------
    # Derived flags
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE and not self.is_deleted

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                sku=self.sku,
                name=self.name,
            )

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
