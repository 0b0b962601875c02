"""Factories and fakes shared by the tests."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    Application,
    Category,
    Company,
    CompanyAssignment,
    CompanyStatus,
    Offer,
    OfferKind,
    OfferStatus,
    User,
    UserRole,
)
from app.services.company_membership import load_actor
from app.services.offer_events import OfferPublished
from app.utils.constants import ROLE_RECRUITER


class RecordingEventPublisher:
    """Collects published events instead of queueing them."""

    def __init__(self):
        self.published: List[OfferPublished] = []

    def offer_published(self, event: OfferPublished) -> None:
        self.published.append(event)


class FailingEventPublisher:
    def __init__(self):
        self.calls = 0

    def offer_published(self, event: OfferPublished) -> None:
        self.calls += 1
        raise ConnectionError("broker unreachable")


async def make_user(db: AsyncSession, email: str, roles: Iterable[str] = (ROLE_RECRUITER,)) -> User:
    user = User(email=email, full_name=email.split("@")[0], is_active=True)
    user.roles = [UserRole(name=role) for role in roles]
    db.add(user)
    await db.commit()
    return user


async def make_company(
    db: AsyncSession,
    owner: User,
    name: Optional[str] = None,
    status: CompanyStatus = CompanyStatus.VALIDATED,
) -> Company:
    company = Company(name=name or f"{owner.full_name} Ltd", owner_id=owner.id, status=status)
    db.add(company)
    await db.commit()
    return company


async def assign(db: AsyncSession, company: Company, user: User) -> CompanyAssignment:
    assignment = CompanyAssignment(company_id=company.id, user_id=user.id)
    db.add(assignment)
    await db.commit()
    return assignment


async def make_category(db: AsyncSession, name: str = "Engineering") -> Category:
    category = Category(name=name)
    db.add(category)
    await db.commit()
    return category


async def make_offer(
    db: AsyncSession,
    company: Company,
    category: Category,
    status: OfferStatus = OfferStatus.DRAFT,
    expiration_date: Optional[date] = None,
    link_company: bool = True,
    **fields,
) -> Offer:
    """Offer owned by the company's owner; link_company=False leaves company_id unset."""
    values = dict(
        title="Backend developer",
        description="Build and run the offers API",
        experience="2-5 years",
        location="Paris",
        offer_kind=OfferKind.JOB,
        contract_type="permanent",
        salary=Decimal("42000.00"),
        expiration_date=expiration_date or (date.today() + timedelta(days=10)),
        sponsored_level=0,
    )
    values.update(fields)
    offer = Offer(
        **values,
        status=status,
        recruiter_id=company.owner_id,
        company_id=company.id if link_company else None,
        created_by_id=company.owner_id,
        category_id=category.id,
    )
    db.add(offer)
    await db.commit()
    return offer


async def make_application(db: AsyncSession, offer: Offer, candidate: User) -> Application:
    application = Application(offer_id=offer.id, candidate_id=candidate.id)
    db.add(application)
    await db.commit()
    return application


class World:
    """Named users and companies of one test scenario."""

    def __init__(self, db, **members):
        self.db = db
        for key, value in members.items():
            setattr(self, key, value)

    async def actor(self, user: User):
        return await load_actor(self.db, user)
