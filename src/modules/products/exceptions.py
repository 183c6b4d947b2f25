"""Catalog domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import BusinessRuleViolation, NotFound


class ProductNotFound(NotFound):
    """The requested product does not exist or has been soft-deleted."""

    default_code = "product_not_found"
    default_message = "Product not found."


class ProductUnavailable(BusinessRuleViolation):
    """The product is missing from the catalog or no longer sold."""

    default_code = "product_unavailable"
    default_message = "Product is not available."
