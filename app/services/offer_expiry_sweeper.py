"""
Offer Expiry Sweeper

Privileged maintenance pass run before listings and on a schedule:
1. closes offers in a mutable status whose expiration date has passed
2. clears sponsorship whose featured window has ended

Both passes are single set-based UPDATEs committed together, so running the
sweep twice in a row is a no-op the second time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DependencyFailure
from app.models.offer import Offer, OfferStatus
from app.services.offer_lifecycle import MUTABLE_STATUSES
from app.utils.helpers import to_naive_utc, utcnow

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SweepResult:
    closed_count: int = 0
    unfeatured_count: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.closed_count or self.unfeatured_count)

    def to_dict(self) -> dict:
        return {"closed_count": self.closed_count, "unfeatured_count": self.unfeatured_count}


class OfferExpirySweeper:
    """Closes expired offers and ends stale sponsorship."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        now = to_naive_utc(now) or utcnow()
        today = now.date()

        close_expired = (
            update(Offer)
            .where(Offer.status.in_(MUTABLE_STATUSES), Offer.expiration_date < today)
            .values(status=OfferStatus.CLOSED)
            .execution_options(synchronize_session=False)
        )
        clear_sponsorship = (
            update(Offer)
            .where(
                Offer.sponsored_level > 0,
                Offer.featured_until.is_not(None),
                Offer.featured_until < now,
            )
            .values(sponsored_level=0, featured_until=None)
            .execution_options(synchronize_session=False)
        )

        try:
            closed = await self.db.execute(close_expired)
            unfeatured = await self.db.execute(clear_sponsorship)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("offer_sweep_failed", error=str(e), exc_info=True)
            raise DependencyFailure("Offer sweep failed") from e

        result = SweepResult(closed_count=closed.rowcount, unfeatured_count=unfeatured.rowcount)
        if result.changed:
            logger.info("offer_sweep", **result.to_dict())
        return result
