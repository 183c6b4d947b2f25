"""Catalog snapshot DTO.

The ordering core never holds a live ``Product`` instance: the catalog
reader hands out frozen snapshots, so a price or stock figure read during
checkout cannot change under the caller.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.products.models import Product


class CatalogProductDTO(BaseModel):
    """Immutable view of a catalog entry at read time."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    sku: str
    name: str
    generic_name: str = ""
    price: Decimal
    stock_quantity: int
    min_stock: int = 0
    prescription_required: bool = False
    is_active: bool = True

    @classmethod
    def from_entity(cls, product: Product) -> CatalogProductDTO:
        return cls(
            id=product.id,
            sku=product.sku,
            name=product.name,
            generic_name=product.generic_name,
            price=product.price,
            stock_quantity=product.stock_quantity,
            min_stock=product.min_stock,
            prescription_required=product.prescription_required,
            is_active=product.is_active,
        )
