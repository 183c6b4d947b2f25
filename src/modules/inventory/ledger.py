"""Django implementation of the inventory ledger.

Each adjustment is a single conditional ``UPDATE``::

    UPDATE products SET stock_quantity = stock_quantity + :delta
    WHERE id = :id AND stock_quantity >= -:delta

so concurrent reservations of the same product serialize in the database
and can never drive the quantity below zero.  There is no
read-then-write window.  The updated row stays locked until the caller's
transaction commits; callers adjusting several products go in product
id order.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db.models import F

from modules.inventory.exceptions import InsufficientStock
from modules.inventory.interfaces import IInventoryLedger
from modules.products.exceptions import ProductNotFound
from modules.products.models import Product

logger = structlog.get_logger(__name__)


class DjangoInventoryLedger(IInventoryLedger):
    def adjust(self, product_id: UUID, delta: int) -> int:
        log = logger.bind(product_id=str(product_id), delta=delta)
        try:
            queryset = Product.objects.filter(id=product_id)
            updated = queryset.filter(stock_quantity__gte=-delta).update(
                stock_quantity=F("stock_quantity") + delta
            )
        except (ValueError, ValidationError):
            raise ProductNotFound(
                f"Product {product_id} not found.", product_id=product_id
            ) from None

        row = queryset.values("stock_quantity", "min_stock").first()
        if row is None:
            raise ProductNotFound(
                f"Product {product_id} not found.", product_id=product_id
            )

        if not updated:
            log.warning(
                "inventory.insufficient_stock",
                requested=-delta,
                available=row["stock_quantity"],
            )
            raise InsufficientStock(
                f"Insufficient stock for product {product_id}: "
                f"requested {-delta}, available {row['stock_quantity']}.",
                product_id=product_id,
                requested=-delta,
                available=row["stock_quantity"],
            )

        remaining = row["stock_quantity"]
        log.info("inventory.adjusted", remaining=remaining)
        if delta < 0 and remaining <= row["min_stock"]:
            log.warning(
                "inventory.low_stock",
                remaining=remaining,
                min_stock=row["min_stock"],
            )
        return remaining

    def available(self, product_id: UUID) -> int:
        try:
            quantity = (
                Product.objects.filter(id=product_id)
                .values_list("stock_quantity", flat=True)
                .first()
            )
        except (ValueError, ValidationError):
            quantity = None
        if quantity is None:
            raise ProductNotFound(
                f"Product {product_id} not found.", product_id=product_id
            )
        return quantity
