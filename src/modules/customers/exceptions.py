"""Customer domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import Forbidden, NotFound


class CustomerNotFound(NotFound):
    """The requested customer does not exist or has been soft-deleted."""

    default_code = "customer_not_found"
    default_message = "Customer not found."


class InactiveCustomer(Forbidden):
    """The customer is deactivated and can no longer shop."""

    default_code = "inactive_customer"
    default_message = "Customer is inactive."
