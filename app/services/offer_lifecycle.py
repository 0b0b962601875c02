"""
Offer Lifecycle Service

State machine for job offers:

    draft -> pending_validation -> validated -> published -> closed
                  |      ^            |
                  v      |            v
                  rejected <----------+

Every transition is guarded (company manager or admin), checked against the
single ``TRANSITIONS`` table, and written with a conditional
``UPDATE ... WHERE status = :observed`` so two concurrent callers can never
both apply the same move. Side effects (the publish event) run after commit
and never undo the transition.

Author: Backend Team
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    ConcurrentModification,
    DependencyFailure,
    Forbidden,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from app.models.application import Application
from app.models.category import Category
from app.models.company import Company
from app.models.offer import Offer, OfferStatus
from app.schemas.offer import OfferCreate, OfferUpdate
from app.services.access_policy import AccessPolicy, access_policy
from app.services.company_membership import Actor, resolve_offer_company_id
from app.services.offer_events import OfferEventPublisher, OfferPublished
from app.utils.constants import REJECTION_REASON_MAX_LENGTH, SPONSORED_LEVEL_MAX, SPONSORED_LEVEL_MIN
from app.utils.helpers import normalize_text, to_naive_utc, utcnow

logger = structlog.get_logger(__name__)


class OfferAction(str, Enum):
    """Actor-initiated lifecycle moves."""

    SUBMIT = "submit"
    VALIDATE = "validate"
    REJECT = "reject"
    PUBLISH = "publish"
    CLOSE = "close"


class Guard(str, Enum):
    MANAGER = "manager"  # manages the offer's company (admins always do)
    ADMIN = "admin"


@dataclass(frozen=True)
class Transition:
    sources: FrozenSet[OfferStatus]
    target: OfferStatus
    guard: Guard


# Statuses an offer can still leave through close or the expiry sweep
MUTABLE_STATUSES = frozenset({
    OfferStatus.PUBLISHED,
    OfferStatus.VALIDATED,
    OfferStatus.DRAFT,
    OfferStatus.PENDING_VALIDATION,
})

TRANSITIONS: Dict[OfferAction, Transition] = {
    OfferAction.SUBMIT: Transition(
        sources=frozenset({OfferStatus.DRAFT}),
        target=OfferStatus.PENDING_VALIDATION,
        guard=Guard.MANAGER,
    ),
    OfferAction.VALIDATE: Transition(
        sources=frozenset({OfferStatus.PENDING_VALIDATION, OfferStatus.DRAFT, OfferStatus.REJECTED}),
        target=OfferStatus.VALIDATED,
        guard=Guard.ADMIN,
    ),
    OfferAction.REJECT: Transition(
        sources=frozenset({OfferStatus.PENDING_VALIDATION, OfferStatus.DRAFT, OfferStatus.VALIDATED}),
        target=OfferStatus.REJECTED,
        guard=Guard.ADMIN,
    ),
    OfferAction.PUBLISH: Transition(
        sources=frozenset({OfferStatus.VALIDATED}),
        target=OfferStatus.PUBLISHED,
        guard=Guard.ADMIN,
    ),
    OfferAction.CLOSE: Transition(
        sources=MUTABLE_STATUSES,
        target=OfferStatus.CLOSED,
        guard=Guard.MANAGER,
    ),
}


def allowed_actions(status: OfferStatus) -> List[OfferAction]:
    """Actions the table permits from a status (guards not considered)."""
    return [action for action, transition in TRANSITIONS.items() if status in transition.sources]


class OfferLifecycle:
    """Guarded, atomic state changes on offers."""

    def __init__(
        self,
        db: AsyncSession,
        events: Optional[OfferEventPublisher] = None,
        policy: AccessPolicy = access_policy,
    ):
        self.db = db
        self.events = events or OfferEventPublisher()
        self.policy = policy

    # ==================== Creation & edits ====================

    async def create_offer(self, actor: Actor, payload: OfferCreate, now: Optional[datetime] = None) -> Offer:
        """
        Create a draft offer for a company the actor manages.

        The company is the explicit ``company_id`` or the actor's primary
        manageable company. The offer is linked to the company's owning user;
        the actual author is kept in ``created_by_id``.
        """
        now = now or utcnow()
        self.policy.require_offer_author(actor)

        company_id = payload.company_id or actor.primary_company_id
        if company_id is None:
            raise Forbidden("No company available to publish offers for")
        self.policy.require_manage(actor, company_id)

        company = await self.db.get(Company, company_id)
        if company is None:
            raise NotFound("Company not found")
        if not company.is_validated:
            raise Forbidden("The company must be validated before it can publish offers")

        values = payload.model_dump(exclude={"company_id"})
        values["featured_until"] = to_naive_utc(values.get("featured_until"))
        errors = self._validate_fields(values, now)
        errors.update(self._validate_sponsorship(values, now))
        errors.update(await self._validate_category(values.get("category_id")))
        if errors:
            raise ValidationError("Invalid offer", errors)

        offer = Offer(
            **values,
            status=OfferStatus.DRAFT,
            recruiter_id=company.owner_id,
            company_id=company.id,
            created_by_id=actor.user_id,
        )
        self.db.add(offer)
        await self._commit()
        await self.db.refresh(offer)

        logger.info(
            "offer_created",
            offer_id=str(offer.id),
            company_id=str(company.id),
            user_id=str(actor.user_id),
        )
        return offer

    async def update_offer(
        self,
        actor: Actor,
        offer_id: uuid.UUID,
        payload: OfferUpdate,
        now: Optional[datetime] = None,
    ) -> Offer:
        """Edit descriptive fields. Status only changes through transitions."""
        now = now or utcnow()
        offer = await self._get_offer(offer_id)
        await self._require_guard(actor, offer, Guard.MANAGER)

        values = payload.model_dump(exclude_unset=True)
        errors = self._validate_fields(values, now)
        if "category_id" in values:
            errors.update(await self._validate_category(values["category_id"]))
        if errors:
            raise ValidationError("Invalid offer", errors)

        for key, value in values.items():
            setattr(offer, key, value)
        await self._commit()
        await self.db.refresh(offer)

        logger.info("offer_updated", offer_id=str(offer.id), fields=sorted(values), user_id=str(actor.user_id))
        return offer

    async def delete_offer(self, actor: Actor, offer_id: uuid.UUID) -> None:
        """Hard delete by a managing user or admin; applications go with it."""
        offer = await self._get_offer(offer_id)
        await self._require_guard(actor, offer, Guard.MANAGER)

        try:
            await self.db.execute(delete(Application).where(Application.offer_id == offer_id))
            await self.db.execute(
                delete(Offer).where(Offer.id == offer_id).execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure("Could not delete offer") from e
        await self._commit()
        self.db.expunge(offer)

        logger.info("offer_deleted", offer_id=str(offer_id), user_id=str(actor.user_id))

    # ==================== Transitions ====================

    async def submit_for_validation(self, actor: Actor, offer_id: uuid.UUID) -> Offer:
        offer = await self._prepare(actor, offer_id, OfferAction.SUBMIT)
        return await self._apply(actor, offer, OfferAction.SUBMIT, {})

    async def validate(self, actor: Actor, offer_id: uuid.UUID, now: Optional[datetime] = None) -> Offer:
        now = now or utcnow()
        offer = await self._prepare(actor, offer_id, OfferAction.VALIDATE)
        return await self._apply(
            actor,
            offer,
            OfferAction.VALIDATE,
            {"validated_at": now, "validated_by_id": actor.user_id, "rejection_reason": None},
        )

    async def reject(
        self,
        actor: Actor,
        offer_id: uuid.UUID,
        reason: Optional[str],
        now: Optional[datetime] = None,
    ) -> Offer:
        now = now or utcnow()
        offer = await self._prepare(actor, offer_id, OfferAction.REJECT)

        reason = normalize_text(reason)
        if reason is None:
            raise ValidationError("A rejection reason is required", {"reason": "required"})
        if len(reason) > REJECTION_REASON_MAX_LENGTH:
            raise ValidationError(
                "Rejection reason is too long",
                {"reason": f"at most {REJECTION_REASON_MAX_LENGTH} characters"},
            )

        return await self._apply(
            actor,
            offer,
            OfferAction.REJECT,
            {"rejection_reason": reason, "validated_at": now, "validated_by_id": actor.user_id},
        )

    async def publish(self, actor: Actor, offer_id: uuid.UUID, now: Optional[datetime] = None) -> Offer:
        now = now or utcnow()
        offer = await self._prepare(actor, offer_id, OfferAction.PUBLISH)
        offer = await self._apply(actor, offer, OfferAction.PUBLISH, {"publication_date": now.date()})
        self._emit_published(offer)
        return offer

    async def close(self, actor: Actor, offer_id: uuid.UUID) -> Offer:
        offer = await self._prepare(actor, offer_id, OfferAction.CLOSE)
        return await self._apply(actor, offer, OfferAction.CLOSE, {})

    # ==================== Sponsorship ====================

    async def mark_featured(
        self,
        actor: Actor,
        offer_id: uuid.UUID,
        level: int = 1,
        featured_until: Optional[datetime] = None,
        duration_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Offer:
        """
        Feature an offer, whatever its status.

        ``featured_until`` wins over ``duration_days``; with neither the
        offer is featured for FEATURED_DEFAULT_DAYS.
        """
        now = now or utcnow()
        offer = await self._get_offer(offer_id)
        await self._require_guard(actor, offer, Guard.MANAGER)

        featured_until = to_naive_utc(featured_until)
        errors = {}
        if level is None or not 1 <= level <= SPONSORED_LEVEL_MAX:
            errors["sponsored_level"] = f"must be between 1 and {SPONSORED_LEVEL_MAX}"
        out_of_range = duration_days is not None and not 1 <= duration_days <= settings.FEATURED_MAX_DAYS
        if featured_until is None and out_of_range:
            errors["duration_days"] = f"must be between 1 and {settings.FEATURED_MAX_DAYS}"
        if featured_until is not None and featured_until <= now:
            errors["featured_until"] = "must be in the future"
        if errors:
            raise ValidationError("Invalid sponsorship", errors)

        if featured_until is None:
            days = duration_days if duration_days is not None else settings.FEATURED_DEFAULT_DAYS
            featured_until = now + timedelta(days=days)

        await self._write_sponsorship(offer, level, featured_until)
        logger.info(
            "offer_featured",
            offer_id=str(offer.id),
            level=level,
            featured_until=featured_until.isoformat(),
            user_id=str(actor.user_id),
        )
        return offer

    async def unfeature(self, actor: Actor, offer_id: uuid.UUID) -> Offer:
        offer = await self._get_offer(offer_id)
        await self._require_guard(actor, offer, Guard.MANAGER)
        await self._write_sponsorship(offer, 0, None)
        logger.info("offer_unfeatured", offer_id=str(offer.id), user_id=str(actor.user_id))
        return offer

    # ==================== Internals ====================

    async def _get_offer(self, offer_id: uuid.UUID) -> Offer:
        offer = await self.db.get(Offer, offer_id)
        if offer is None:
            raise NotFound("Offer not found")
        return offer

    async def _require_guard(self, actor: Actor, offer: Offer, guard: Guard) -> None:
        if guard == Guard.ADMIN:
            self.policy.require_admin(actor)
            return
        company_id = await resolve_offer_company_id(self.db, offer)
        self.policy.require_edit_offer(actor, offer, company_id)

    async def _prepare(self, actor: Actor, offer_id: uuid.UUID, action: OfferAction) -> Offer:
        """Load, authorize and check the transition table. Nothing is written."""
        offer = await self._get_offer(offer_id)
        transition = TRANSITIONS[action]
        await self._require_guard(actor, offer, transition.guard)
        if offer.status not in transition.sources:
            raise InvalidTransition(current=offer.status.value, requested=action.value)
        return offer

    async def _apply(self, actor: Actor, offer: Offer, action: OfferAction, values: dict) -> Offer:
        """Write the transition only if the status is still the one observed."""
        transition = TRANSITIONS[action]
        offer_id = offer.id
        observed = offer.status

        stmt = (
            update(Offer)
            .where(Offer.id == offer_id, Offer.status == observed)
            .values(status=transition.target, **values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure(f"Could not {action.value} offer") from e

        if result.rowcount != 1:
            await self.db.rollback()
            logger.warning(
                "offer_transition_conflict",
                offer_id=str(offer_id),
                observed=observed.value,
                requested=action.value,
                user_id=str(actor.user_id),
            )
            raise ConcurrentModification(
                f"Offer changed while trying to {action.value} it; reload and retry"
            )

        await self._commit()
        await self.db.refresh(offer)

        logger.info(
            "offer_transition",
            offer_id=str(offer_id),
            action=action.value,
            from_status=observed.value,
            to_status=transition.target.value,
            user_id=str(actor.user_id),
        )
        return offer

    async def _write_sponsorship(self, offer: Offer, level: int, featured_until: Optional[datetime]) -> None:
        stmt = (
            update(Offer)
            .where(Offer.id == offer.id)
            .values(sponsored_level=level, featured_until=featured_until)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure("Could not update sponsorship") from e
        if result.rowcount != 1:
            await self.db.rollback()
            raise NotFound("Offer not found")
        await self._commit()
        await self.db.refresh(offer)

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure("Database write failed") from e

    def _emit_published(self, offer: Offer) -> None:
        event = OfferPublished(
            offer_id=offer.id,
            category_id=offer.category_id,
            title=offer.title,
            publication_date=offer.publication_date,
        )
        try:
            self.events.offer_published(event)
        except Exception as e:
            logger.error("offer_event_dispatch_failed", offer_id=str(offer.id), error=str(e), exc_info=True)

    def _validate_fields(self, values: dict, now: datetime) -> Dict[str, str]:
        errors = {}
        expiration = values.get("expiration_date")
        if "expiration_date" in values:
            if not isinstance(expiration, date):
                errors["expiration_date"] = "required"
            elif expiration <= now.date():
                errors["expiration_date"] = "must be after today"
        salary = values.get("salary")
        if salary is not None and Decimal(salary) < 0:
            errors["salary"] = "must not be negative"
        return errors

    def _validate_sponsorship(self, values: dict, now: datetime) -> Dict[str, str]:
        errors = {}
        level = values.get("sponsored_level") or 0
        if not SPONSORED_LEVEL_MIN <= level <= SPONSORED_LEVEL_MAX:
            errors["sponsored_level"] = f"must be between {SPONSORED_LEVEL_MIN} and {SPONSORED_LEVEL_MAX}"
        values["sponsored_level"] = level
        featured_until = values.get("featured_until")
        if featured_until is not None and featured_until <= now:
            errors["featured_until"] = "must be in the future"
        return errors

    async def _validate_category(self, category_id: Optional[uuid.UUID]) -> Dict[str, str]:
        if category_id is None:
            return {"category_id": "required"}
        result = await self.db.execute(select(Category.id).where(Category.id == category_id))
        if result.scalar_one_or_none() is None:
            return {"category_id": "unknown category"}
        return {}
