"""
Company membership lookup.

Builds the per-request ``Actor`` (user id, role names, manageable companies)
and owns the single rule that maps an offer to its company.
"""

import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.company import Company, CompanyAssignment
from app.models.offer import Offer
from app.models.user import User
from app.utils.constants import ROLE_ADMIN, ROLE_RECRUITER


@dataclass(frozen=True)
class Membership:
    """Companies a user owns or has been assigned to."""

    owned_company_id: Optional[uuid.UUID] = None
    assigned_company_ids: FrozenSet[uuid.UUID] = frozenset()


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, resolved once per request and never cached across requests."""

    user_id: uuid.UUID
    roles: FrozenSet[str] = frozenset()
    owned_company_id: Optional[uuid.UUID] = None
    assigned_company_ids: FrozenSet[uuid.UUID] = frozenset()
    manageable_company_ids: FrozenSet[uuid.UUID] = field(init=False)

    def __post_init__(self):
        manageable = set(self.assigned_company_ids)
        if self.owned_company_id is not None:
            manageable.add(self.owned_company_id)
        object.__setattr__(self, "manageable_company_ids", frozenset(manageable))

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles

    @property
    def is_recruiter(self) -> bool:
        return ROLE_RECRUITER in self.roles

    @property
    def primary_company_id(self) -> Optional[uuid.UUID]:
        """Owned company first, then the first assigned one (stable order)."""
        if self.owned_company_id is not None:
            return self.owned_company_id
        if self.assigned_company_ids:
            return sorted(self.assigned_company_ids, key=str)[0]
        return None

    @classmethod
    def build(
        cls,
        user_id: uuid.UUID,
        roles: Iterable[str],
        membership: Optional[Membership] = None,
    ) -> "Actor":
        membership = membership or Membership()
        return cls(
            user_id=user_id,
            roles=frozenset(roles),
            owned_company_id=membership.owned_company_id,
            assigned_company_ids=membership.assigned_company_ids,
        )


class CompanyMembershipLookup:
    """Resolves owned and assigned companies for a user."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lookup(self, user_id: uuid.UUID) -> Membership:
        result = await self.db.execute(select(Company.id).where(Company.owner_id == user_id))
        owned_company_id = result.scalar_one_or_none()

        result = await self.db.execute(
            select(CompanyAssignment.company_id).where(CompanyAssignment.user_id == user_id)
        )
        assigned = frozenset(result.scalars().all())

        return Membership(owned_company_id=owned_company_id, assigned_company_ids=assigned)


async def load_actor(db: AsyncSession, user: User) -> Actor:
    """Build the request actor for an authenticated user."""
    membership = await CompanyMembershipLookup(db).lookup(user.id)
    return Actor.build(user.id, user.role_names, membership)


async def resolve_offer_company_id(db: AsyncSession, offer: Offer) -> Optional[uuid.UUID]:
    """
    Company owning an offer.

    Offers are linked to their owning user; the company is the one that user
    owns, unless the offer carries an explicit company id.
    """
    if offer.company_id is not None:
        return offer.company_id
    if offer.recruiter_id is None:
        return None
    result = await db.execute(select(Company.id).where(Company.owner_id == offer.recruiter_id))
    return result.scalar_one_or_none()


async def owner_ids_for_companies(db: AsyncSession, company_ids: Iterable[uuid.UUID]) -> FrozenSet[uuid.UUID]:
    """Owning users of the given companies."""
    company_ids = list(company_ids)
    if not company_ids:
        return frozenset()
    result = await db.execute(select(Company.owner_id).where(Company.id.in_(company_ids)))
    return frozenset(result.scalars().all())
