"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """Raised when an order is placed from a cart."""

    order_number: str
    customer_id: str
    total: str
    requires_prescription: bool = False
    product_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled and its stock restored."""

    order_number: str
    reason: str
    previous_status: str


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every admin-driven status change other than cancellation."""

    order_number: str
    old_status: str
    new_status: str
    tracking_number: Optional[str] = None
