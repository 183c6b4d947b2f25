"""Order domain exceptions.

Raised by the Service Layer; ``api_exception_handler`` maps them to HTTP
responses through their base class.
"""

from __future__ import annotations

from modules.core.exceptions import BusinessRuleViolation, Conflict, Forbidden, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist."""

    default_code = "order_not_found"
    default_message = "Order not found."


class OrderAccessDenied(Forbidden):
    """The requester neither owns the order nor is an admin."""

    default_code = "order_access_denied"
    default_message = "You do not have access to this order."


class InvalidTransition(BusinessRuleViolation):
    """The state machine does not allow the requested status change."""

    default_code = "invalid_transition"
    default_message = "Invalid order status transition."


class OrderNumberConflict(Conflict):
    """No unique order number could be allocated."""

    default_code = "order_number_conflict"
    default_message = "Could not allocate a unique order number."
