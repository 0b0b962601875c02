"""
Offer Query Service

Filtered, paginated offer listings for three audiences:
- public: only active offers (published, not past expiration)
- recruiter: only offers owned by the users owning the actor's companies
- admin: everything

Audience narrowing is applied before the caller's filters and cannot be
widened by them. Every listing starts with an expiry sweep so stale offers
and sponsorship never show up.

Author: Backend Team
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import structlog
from sqlalchemy import and_, func, not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import Forbidden, NotFound
from app.models.company import Company
from app.models.offer import Offer, OfferStatus
from app.schemas.offer import Audience, OfferFilters, OfferOrdering, Pagination
from app.services.access_policy import AccessPolicy, access_policy
from app.services.company_membership import Actor, owner_ids_for_companies
from app.services.offer_expiry_sweeper import OfferExpirySweeper, SweepResult
from app.utils.helpers import page_count, to_naive_utc, utcnow

logger = structlog.get_logger(__name__)


@dataclass
class OfferPage:
    items: List[Offer]
    total: int
    page: int
    size: int
    pages: int
    sweep: Optional[SweepResult] = None


@dataclass
class OfferStats:
    total: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    sponsored_active: int = 0


def featured_clause(now: datetime):
    """level > 0 and the featured window is open (or unbounded)."""
    return and_(
        Offer.sponsored_level > 0,
        or_(Offer.featured_until.is_(None), Offer.featured_until >= now),
    )


def active_clause(now: datetime):
    return and_(Offer.status == OfferStatus.PUBLISHED, Offer.expiration_date >= now.date())


class OfferQueryService:
    """Read side of the offer core."""

    def __init__(self, db: AsyncSession, policy: AccessPolicy = access_policy):
        self.db = db
        self.policy = policy

    async def list(
        self,
        filters: Optional[OfferFilters] = None,
        pagination: Optional[Pagination] = None,
        audience: Audience = Audience.PUBLIC,
        actor: Optional[Actor] = None,
        ordering: OfferOrdering = OfferOrdering.NEWEST,
        now: Optional[datetime] = None,
    ) -> OfferPage:
        now = to_naive_utc(now) or utcnow()
        filters = filters or OfferFilters()
        pagination = pagination or Pagination()

        sweep = None
        if settings.SWEEP_ON_READ:
            sweep = await OfferExpirySweeper(self.db).sweep(now)

        conditions = await self._audience_conditions(audience, actor, now)
        conditions.extend(await self._filter_conditions(filters, audience, actor, now))

        size = min(pagination.size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        count_query = select(func.count(Offer.id)).where(*conditions)
        total = (await self.db.execute(count_query)).scalar_one()

        query = (
            select(Offer)
            .where(*conditions)
            .order_by(*self._order_by(ordering))
            .offset((pagination.page - 1) * size)
            .limit(size)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        items = list(result.scalars().all())

        logger.debug(
            "offer_list",
            audience=audience.value,
            total=total,
            page=pagination.page,
            size=size,
        )
        return OfferPage(
            items=items,
            total=total,
            page=pagination.page,
            size=size,
            pages=page_count(total, size),
            sweep=sweep,
        )

    async def featured(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[Offer]:
        """Active, currently featured offers for the home page slot."""
        now = to_naive_utc(now) or utcnow()
        limit = min(limit or settings.FEATURED_LIST_LIMIT, settings.FEATURED_LIST_LIMIT)
        if settings.SWEEP_ON_READ:
            await OfferExpirySweeper(self.db).sweep(now)

        query = (
            select(Offer)
            .where(active_clause(now), featured_clause(now))
            .order_by(Offer.sponsored_level.desc(), Offer.publication_date.desc(), Offer.id)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get(
        self,
        offer_id: uuid.UUID,
        actor: Optional[Actor] = None,
        audience: Audience = Audience.PUBLIC,
        now: Optional[datetime] = None,
    ) -> Offer:
        """Single offer under the same audience narrowing as listings."""
        now = to_naive_utc(now) or utcnow()
        conditions = await self._audience_conditions(audience, actor, now)
        query = (
            select(Offer)
            .where(Offer.id == offer_id, *conditions)
            .execution_options(populate_existing=True)
        )
        offer = (await self.db.execute(query)).scalar_one_or_none()
        if offer is None:
            raise NotFound("Offer not found")
        return offer

    async def status_counts(
        self,
        actor: Actor,
        audience: Audience = Audience.RECRUITER,
        now: Optional[datetime] = None,
    ) -> OfferStats:
        """Per-status counts and currently sponsored count within the audience."""
        now = to_naive_utc(now) or utcnow()
        if settings.SWEEP_ON_READ:
            await OfferExpirySweeper(self.db).sweep(now)

        conditions = await self._audience_conditions(audience, actor, now)

        query = select(Offer.status, func.count(Offer.id)).where(*conditions).group_by(Offer.status)
        rows = (await self.db.execute(query)).all()
        by_status = {status.value: 0 for status in OfferStatus}
        for status, count in rows:
            by_status[OfferStatus(status).value] = count

        sponsored_query = select(func.count(Offer.id)).where(*conditions, featured_clause(now))
        sponsored_active = (await self.db.execute(sponsored_query)).scalar_one()

        return OfferStats(total=sum(by_status.values()), by_status=by_status, sponsored_active=sponsored_active)

    # ==================== Internals ====================

    async def _audience_conditions(self, audience: Audience, actor: Optional[Actor], now: datetime) -> list:
        if audience == Audience.PUBLIC:
            return [active_clause(now)]

        if actor is None:
            raise Forbidden("Authentication required")

        if audience == Audience.ADMIN:
            self.policy.require_admin(actor)
            return []

        owners = await owner_ids_for_companies(self.db, actor.manageable_company_ids)
        if not owners:
            # A recruiter without a company still sees offers linked to itself
            return [Offer.recruiter_id == actor.user_id]
        return [Offer.recruiter_id.in_(owners)]

    async def _filter_conditions(
        self,
        filters: OfferFilters,
        audience: Audience,
        actor: Optional[Actor],
        now: datetime,
    ) -> list:
        conditions = []

        if filters.status is not None:
            conditions.append(Offer.status == filters.status)
        if filters.offer_kind is not None:
            conditions.append(Offer.offer_kind == filters.offer_kind)
        if filters.category_id is not None:
            conditions.append(Offer.category_id == filters.category_id)
        if filters.location:
            conditions.append(Offer.location.ilike(f"%{filters.location.strip()}%"))
        if filters.experience:
            conditions.append(Offer.experience.ilike(f"%{filters.experience.strip()}%"))
        if filters.search:
            term = f"%{filters.search.strip()}%"
            conditions.append(or_(Offer.title.ilike(term), Offer.description.ilike(term)))
        if filters.recruiter_id is not None:
            conditions.append(Offer.recruiter_id == filters.recruiter_id)

        if filters.company_id is not None:
            # Offers are linked by owning user; the company maps to its owner
            if audience == Audience.RECRUITER:
                self.policy.require_manage(actor, filters.company_id)
            owner_id = (
                await self.db.execute(select(Company.owner_id).where(Company.id == filters.company_id))
            ).scalar_one_or_none()
            if owner_id is None:
                raise NotFound("Company not found")
            conditions.append(Offer.recruiter_id == owner_id)

        if filters.sponsored == "yes":
            conditions.append(featured_clause(now))
        elif filters.sponsored == "no":
            conditions.append(not_(featured_clause(now)))
        if filters.sponsored_level is not None:
            conditions.append(Offer.sponsored_level == filters.sponsored_level)
        if filters.sponsored_level_min is not None:
            conditions.append(Offer.sponsored_level >= filters.sponsored_level_min)

        return conditions

    def _order_by(self, ordering: OfferOrdering) -> list:
        if ordering == OfferOrdering.PUBLISHED:
            return [Offer.publication_date.desc(), Offer.created_at.desc(), Offer.id]
        return [Offer.created_at.desc(), Offer.id]
