"""Celery tasks of the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.db.models import Q

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int | None = None) -> dict:
    """Relay pending outbox rows to the in-process event bus.

    Rows are processed oldest first.  A handler failure marks that row
    ``FAILED`` (retried on the next run until ``OutboxEvent.MAX_RETRIES``)
    and does not stop the batch.
    """
    limit = batch_size or settings.OUTBOX_BATCH_SIZE
    published = failed = 0

    with transaction.atomic():
        rows = list(
            OutboxEvent.objects.select_for_update()
            .filter(
                Q(status=EventStatus.PENDING)
                | Q(status=EventStatus.FAILED, retry_count__lt=OutboxEvent.MAX_RETRIES)
            )
            .order_by("created_at")[:limit]
        )

        for row in rows:
            try:
                event = DomainEvent.from_payload(row.event_type, row.payload)
                event_bus.publish(event)
            except Exception as exc:  # one bad row must not block the batch
                row.mark_as_failed(str(exc))
                failed += 1
                logger.warning(
                    "outbox.publish_failed",
                    outbox_id=str(row.id),
                    event_type=row.event_type,
                    error=str(exc),
                    retry_count=row.retry_count,
                )
                continue
            row.mark_as_published()
            published += 1

    logger.info("outbox.batch_published", published=published, failed=failed)
    return {"published": published, "failed": failed}
