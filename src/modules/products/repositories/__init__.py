"""Catalog repositories package."""

from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.repositories.interfaces import ICatalogReader

__all__ = ["ICatalogReader", "ProductDjangoRepository"]
