"""Cart domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import Forbidden, NotFound, ValidationFailure


class InvalidQuantity(ValidationFailure):
    """Quantity below 1 (or negative on update) or above the per-line maximum."""

    default_code = "invalid_quantity"
    default_message = "Invalid quantity."


class LineNotFound(NotFound):
    """The product has no line in the customer's cart."""

    default_code = "line_not_found"
    default_message = "Item not found in cart."


class CartNotFound(NotFound):
    default_code = "cart_not_found"
    default_message = "Cart not found."


class CartInactive(Forbidden):
    """The cart was retired together with its customer."""

    default_code = "cart_inactive"
    default_message = "Cart is no longer active."


class EmptyCart(ValidationFailure):
    default_code = "empty_cart"
    default_message = "Cart is empty."
