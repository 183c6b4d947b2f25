"""Django ORM implementation of the catalog reader.

Error handling follows the Null Object pattern: methods return ``None``
(or omit the key) for unknown products; the Service Layer decides how to
translate a missing entity into a domain error.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional
from uuid import UUID

from django.core.exceptions import ValidationError

from modules.products.dtos import CatalogProductDTO
from modules.products.models import Product
from modules.products.repositories.interfaces import ICatalogReader


class ProductDjangoRepository(ICatalogReader):
    """Catalog reader backed by Django ORM.  Soft-deleted products are invisible."""

    def get_product(self, product_id: UUID) -> Optional[CatalogProductDTO]:
        try:
            product = Product.objects.alive().filter(id=product_id).first()
        except (ValueError, ValidationError):
            return None
        return CatalogProductDTO.from_entity(product) if product else None

    def get_products(self, product_ids: Iterable[UUID]) -> Dict[UUID, CatalogProductDTO]:
        ids = list(product_ids)
        if not ids:
            return {}
        return {
            product.id: CatalogProductDTO.from_entity(product)
            for product in Product.objects.alive().filter(id__in=ids)
        }
