"""Inventory domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import BusinessRuleViolation


class InsufficientStock(BusinessRuleViolation):
    """Not enough stock to satisfy a reservation.

    Raise with ``product_id``, ``requested`` and ``available``; the
    shortfall is derived.
    """

    status_code = 409
    default_code = "insufficient_stock"
    default_message = "Insufficient stock."

    def __init__(self, message=None, **context):
        requested = context.get("requested")
        available = context.get("available")
        if requested is not None and available is not None:
            context.setdefault("shortfall", max(requested - available, 0))
        super().__init__(message, **context)
