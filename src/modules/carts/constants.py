"""Cart domain constants."""

DEFAULT_MAX_LINE_QUANTITY = 999


class IssueKind:
    UNAVAILABLE = "unavailable"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PRICE_CHANGED = "price_changed"
