"""Unit tests for the outbox relay task."""

from uuid import uuid4

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.tasks import publish_outbox_events
from shared.infrastructure import bus as bus_module
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


@pytest.fixture()
def bus(monkeypatch):
    fresh = InMemoryEventBus()
    monkeypatch.setattr("modules.core.tasks.event_bus", fresh)
    return fresh


def _row(event_type="OrderCancelled", **payload):
    aggregate_id = str(uuid4())
    data = {
        "aggregate_id": aggregate_id,
        "order_number": "ORD-20260101-A1B2C3",
        "reason": "Cancelled by customer",
        "previous_status": "pending",
    }
    data.update(payload)
    return OutboxEvent.objects.create(
        event_type=event_type, payload=data, aggregate_id=aggregate_id, topic="orders"
    )


def test_pending_rows_are_published(bus):
    received = []

    class Handler:
        def handle(self, event):
            received.append(event)

    from modules.orders.events import OrderCancelled

    bus.subscribe(OrderCancelled, Handler())
    row = _row()

    result = publish_outbox_events()

    assert result == {"published": 1, "failed": 0}
    row.refresh_from_db()
    assert row.status == EventStatus.PUBLISHED
    assert row.processed_at is not None
    assert received[0].reason == "Cancelled by customer"


def test_unknown_event_marks_row_failed(bus):
    row = _row(event_type="NoSuchEvent")

    result = publish_outbox_events()

    assert result == {"published": 0, "failed": 1}
    row.refresh_from_db()
    assert row.status == EventStatus.FAILED
    assert row.retry_count == 1
    assert "NoSuchEvent" in row.error_message


def test_exhausted_rows_are_skipped(bus):
    row = _row(event_type="NoSuchEvent")
    row.status = EventStatus.FAILED
    row.retry_count = OutboxEvent.MAX_RETRIES
    row.save()

    assert publish_outbox_events() == {"published": 0, "failed": 0}
    assert row.can_retry is False


def test_batch_size_limits_rows(bus):
    for _ in range(3):
        _row()
    assert publish_outbox_events(batch_size=2)["published"] == 2
    assert OutboxEvent.objects.filter(status=EventStatus.PENDING).count() == 1


def test_global_bus_is_a_singleton():
    assert isinstance(bus_module.event_bus, InMemoryEventBus)
