"""Domain error taxonomy shared by every module.

Services raise subclasses of these bases; the API layer never inspects
the concrete class.  ``api_exception_handler`` renders any
``DomainError`` using its ``status_code`` and ``default_code`` plus the
structured ``context`` given at raise time.
"""

from __future__ import annotations

from typing import Any, Dict


class DomainError(Exception):
    """Base class for every business or input failure raised by a service."""

    status_code: int = 400
    default_code: str = "error"
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.default_message
        self.context: Dict[str, Any] = context
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.default_code


class ValidationFailure(DomainError):
    """Malformed or out-of-range input; the caller can correct and retry."""

    status_code = 400
    default_code = "invalid"
    default_message = "Invalid input."


class NotFound(DomainError):
    """A cart, order, customer or product does not exist."""

    status_code = 404
    default_code = "not_found"
    default_message = "Resource not found."


class Conflict(DomainError):
    """A uniqueness guarantee could not be satisfied."""

    status_code = 409
    default_code = "conflict"
    default_message = "Resource conflict."


class Forbidden(DomainError):
    """The requester is not allowed to perform the operation."""

    status_code = 403
    default_code = "permission_denied"
    default_message = "You do not have permission to perform this action."


class BusinessRuleViolation(DomainError):
    """A valid request that breaks a business rule (stock, state machine)."""

    status_code = 400
    default_code = "business_rule_violation"
    default_message = "Business rule violated."
