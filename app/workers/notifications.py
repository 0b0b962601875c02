"""Notification tasks fed by offer events."""

import uuid
from typing import Dict, Optional

import structlog

from app.config import settings
from app.db.session import SyncSessionLocal
from app.models.offer import Offer, OfferStatus
from app.services.offer_events import OFFER_PUBLISHED_TASK
from app.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


def offer_link(offer_id: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/offres/{offer_id}"


def build_offer_published_notification(offer: Offer) -> Dict[str, str]:
    """In-app notification for candidates of the offer's category."""
    return {
        "title": "New offer in your category",
        "message": f"{offer.title} ({offer.location}) was just published.",
        "link": offer_link(str(offer.id)),
        "category_id": str(offer.category_id),
    }


@celery_app.task(name=OFFER_PUBLISHED_TASK)
def offer_published(
    offer_id: str,
    category_id: str,
    title: Optional[str] = None,
    publication_date: Optional[str] = None,
) -> Dict:
    """
    Prepare the "new offer" notification for candidates of the category.

    The offer is read again so an offer closed or deleted before the worker
    picked up the event does not notify anybody. Delivery (mail, in-app
    fan-out) belongs to the notification service.
    """
    db = SyncSessionLocal()
    try:
        offer = db.get(Offer, uuid.UUID(offer_id))
        if offer is None or offer.status != OfferStatus.PUBLISHED:
            logger.info("offer_notification_skipped", offer_id=offer_id)
            return {"status": "skipped", "offer_id": offer_id}

        notification = build_offer_published_notification(offer)
        logger.info(
            "offer_notification_prepared",
            offer_id=offer_id,
            category_id=category_id,
            link=notification["link"],
        )
        return {"status": "prepared", "offer_id": offer_id, "notification": notification}
    finally:
        db.close()
