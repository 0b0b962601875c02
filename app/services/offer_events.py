"""Outbound offer events (fire-and-forget)."""

import uuid
from dataclasses import asdict, dataclass
from datetime import date

import structlog

logger = structlog.get_logger(__name__)

OFFER_PUBLISHED_TASK = "app.workers.notifications.offer_published"


@dataclass(frozen=True)
class OfferPublished:
    """An offer went live; candidates of the category should hear about it."""

    offer_id: uuid.UUID
    category_id: uuid.UUID
    title: str
    publication_date: date

    def to_payload(self) -> dict:
        payload = asdict(self)
        payload["offer_id"] = str(self.offer_id)
        payload["category_id"] = str(self.category_id)
        payload["publication_date"] = self.publication_date.isoformat()
        return payload


class OfferEventPublisher:
    """Queues offer events on the Celery broker without waiting for delivery."""

    def __init__(self, celery_app=None):
        self._celery_app = celery_app

    @property
    def celery_app(self):
        if self._celery_app is None:
            from app.workers.celery_app import celery_app

            self._celery_app = celery_app
        return self._celery_app

    def offer_published(self, event: OfferPublished) -> None:
        self.celery_app.send_task(OFFER_PUBLISHED_TASK, kwargs=event.to_payload())
        logger.info("offer_event_queued", event_type="offer_published", offer_id=str(event.offer_id))
