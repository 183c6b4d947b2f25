"""Django ORM implementation of the Order repository.

Domain events collected on the aggregate are written to ``OutboxEvent``
by ``save()``, inside the caller's transaction, so an event exists if and
only if the change that produced it was committed.

Concurrency control on status updates uses ``select_for_update()``.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Max, QuerySet

from modules.core.exceptions import ValidationFailure
from modules.core.models import OutboxEvent
from modules.orders.exceptions import OrderNumberConflict
from modules.orders.filters import OrderFilter
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any], items: List[Dict[str, Any]]) -> Order:
        try:
            with transaction.atomic():
                order = Order.objects.create(**data)
        except IntegrityError as exc:
            if "order_number" not in str(exc):
                raise
            raise OrderNumberConflict(order_number=data.get("order_number")) from exc

        OrderItem.objects.bulk_create(
            [
                OrderItem(order=order, position=position, **item)
                for position, item in enumerate(items)
            ]
        )
        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(items),
        )
        return order

    def order_number_exists(self, order_number: str) -> bool:
        return Order.objects.filter(order_number=order_number).exists()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded items and history.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_related("customer")
                .prefetch_related("items", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock.  Must run inside ``transaction.atomic``."""
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        customer_id: Optional[UUID] = None,
    ) -> QuerySet[Order]:
        queryset = Order.objects.select_related("customer").prefetch_related("items")
        if customer_id is not None:
            queryset = queryset.filter(customer_id=customer_id)
        if filters:
            filterset = OrderFilter(filters, queryset=queryset)
            if not filterset.is_valid():
                raise ValidationFailure(
                    "Invalid order filters.", errors=filterset.errors.get_json_data()
                )
            queryset = filterset.qs
        return queryset.order_by("-created_at", "-id")

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        """Persist an order and write its pending domain events to the outbox."""
        with transaction.atomic():
            entity.save()

            events = entity.domain_events
            for event in events:
                OutboxEvent.objects.create(
                    event_type=event.event_name,
                    aggregate_id=str(event.aggregate_id),
                    payload=_serialize_event_payload(event),
                    topic="orders",
                )
            entity.clear_domain_events()

        logger.debug("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    # ------------------------------------------------------------------
    # Status history
    # ------------------------------------------------------------------

    def add_history(
        self,
        order: Order,
        new_status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> OrderStatusHistory:
        """Append a history record.  Callers hold the order row lock."""
        last = order.status_history.aggregate(last=Max("sequence"))["last"]
        history = OrderStatusHistory.objects.create(
            order=order,
            sequence=1 if last is None else last + 1,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
            actor_id=actor_id,
        )
        logger.info(
            "order.history_added",
            order_id=str(order.id),
            sequence=history.sequence,
            old_status=old_status,
            new_status=new_status,
        )
        return history


def _serialize_event_payload(event: Any) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, list):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
