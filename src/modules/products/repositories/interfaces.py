"""Catalog reader interface.

The ordering core only ever reads the catalog; creating and editing
products belongs to the catalog administration surface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, Optional
from uuid import UUID

if TYPE_CHECKING:
    from modules.products.dtos import CatalogProductDTO


class ICatalogReader(ABC):
    """Read-only contract over the product catalog."""

    @abstractmethod
    def get_product(self, product_id: UUID) -> Optional[CatalogProductDTO]:
        """Return a snapshot of the product, or ``None`` if it does not exist."""

    @abstractmethod
    def get_products(self, product_ids: Iterable[UUID]) -> Dict[UUID, CatalogProductDTO]:
        """Return snapshots keyed by id; missing ids are simply absent."""
