"""Company validation workflow and community-manager assignments."""

import uuid
from datetime import timedelta

import pytest

from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.models import CompanyStatus, OfferKind
from app.schemas.offer import OfferCreate
from app.services.company_admin import CompanyAdminService
from app.services.company_membership import load_actor
from app.services.offer_lifecycle import OfferLifecycle
from app.utils.constants import ROLE_COMMUNITY_MANAGER
from tests.factories import make_company, make_user


async def test_validated_company_can_create_offers(world, events, now):
    owner_user = await make_user(world.db, "frank@example.com")
    company = await make_company(world.db, owner_user, "Fresh", status=CompanyStatus.PENDING)
    admin = await world.actor(world.admin)

    company = await CompanyAdminService(world.db).validate_company(admin, company.id)
    assert company.status == CompanyStatus.VALIDATED

    owner = await load_actor(world.db, owner_user)
    payload = OfferCreate(
        title="Support engineer",
        description="Help customers",
        experience="Any",
        location="Bordeaux",
        offer_kind=OfferKind.JOB,
        contract_type="fixed-term",
        expiration_date=now.date() + timedelta(days=15),
        category_id=world.category.id,
    )
    offer = await OfferLifecycle(world.db, events=events).create_offer(owner, payload, now=now)
    assert offer.company_id == company.id


async def test_reject_company_requires_reason(world):
    admin = await world.actor(world.admin)
    service = CompanyAdminService(world.db)

    with pytest.raises(ValidationError):
        await service.reject_company(admin, world.company_c.id, " ")

    company = await service.reject_company(admin, world.company_c.id, "Unverifiable registration number")
    assert company.status == CompanyStatus.REJECTED
    assert company.rejection_reason == "Unverifiable registration number"

    company = await service.validate_company(admin, world.company_c.id)
    assert company.rejection_reason is None


async def test_company_administration_is_admin_only(world):
    owner = await world.actor(world.owner_a)
    service = CompanyAdminService(world.db)

    with pytest.raises(Forbidden):
        await service.validate_company(owner, world.company_a.id)
    with pytest.raises(Forbidden):
        await service.assign_manager(owner, world.company_a.id, world.cm.id)


async def test_assign_and_unassign_manager(world):
    admin = await world.actor(world.admin)
    service = CompanyAdminService(world.db)

    assignment = await service.assign_manager(admin, world.company_c.id, world.cm.id)
    again = await service.assign_manager(admin, world.company_c.id, world.cm.id)
    assert again.id == assignment.id

    cm = await world.actor(world.cm)
    assert world.company_c.id in cm.manageable_company_ids

    await service.unassign_manager(admin, world.company_c.id, world.cm.id)
    cm = await world.actor(world.cm)
    assert world.company_c.id not in cm.manageable_company_ids

    with pytest.raises(NotFound):
        await service.unassign_manager(admin, world.company_c.id, world.cm.id)


async def test_only_community_managers_can_be_assigned(world):
    admin = await world.actor(world.admin)
    service = CompanyAdminService(world.db)

    with pytest.raises(ValidationError):
        await service.assign_manager(admin, world.company_c.id, world.owner_a.id)
    with pytest.raises(NotFound):
        await service.assign_manager(admin, world.company_c.id, uuid.uuid4())
    with pytest.raises(NotFound):
        await service.assign_manager(admin, uuid.uuid4(), world.cm.id)

    second_cm = await make_user(world.db, "gina@example.com", [ROLE_COMMUNITY_MANAGER])
    assignment = await service.assign_manager(admin, world.company_c.id, second_cm.id)
    assert assignment.user_id == second_cm.id
