"""Offer listings: audience narrowing, filters, pagination and read-time sweeps."""

import uuid
from datetime import date, timedelta

import pytest

from app.config import settings
from app.core.exceptions import Forbidden, NotFound
from app.models import OfferKind, OfferStatus
from app.schemas.offer import Audience, OfferFilters, OfferOrdering, Pagination
from app.services.offer_lifecycle import OfferLifecycle
from app.services.offer_query_service import OfferQueryService
from tests.factories import make_offer


def ids(page):
    return {offer.id for offer in page.items}


async def test_public_audience_sees_only_active_offers(world, now):
    live = await make_offer(world.db, world.company_a, world.category, status=OfferStatus.PUBLISHED)
    await make_offer(world.db, world.company_a, world.category, status=OfferStatus.DRAFT)
    await make_offer(world.db, world.company_b, world.category, status=OfferStatus.VALIDATED)
    stale = await make_offer(
        world.db,
        world.company_c,
        world.category,
        status=OfferStatus.PUBLISHED,
        expiration_date=now.date() - timedelta(days=1),
    )

    page = await OfferQueryService(world.db).list(audience=Audience.PUBLIC, now=now)

    assert ids(page) == {live.id}
    assert page.sweep.closed_count == 1
    await world.db.refresh(stale)
    assert stale.status == OfferStatus.CLOSED


async def test_public_audience_cannot_be_widened_by_status_filter(world, now):
    await make_offer(world.db, world.company_a, world.category, status=OfferStatus.DRAFT)

    page = await OfferQueryService(world.db).list(
        OfferFilters(status=OfferStatus.DRAFT), audience=Audience.PUBLIC, now=now
    )

    assert page.total == 0


async def test_community_manager_sees_only_assigned_companies(world, now):
    offer_a = await make_offer(world.db, world.company_a, world.category)
    offer_b = await make_offer(world.db, world.company_b, world.category, status=OfferStatus.PUBLISHED)
    legacy_b = await make_offer(world.db, world.company_b, world.category, link_company=False)
    await make_offer(world.db, world.company_c, world.category, status=OfferStatus.PUBLISHED)
    cm = await world.actor(world.cm)

    page = await OfferQueryService(world.db).list(audience=Audience.RECRUITER, actor=cm, now=now)

    assert ids(page) == {offer_a.id, offer_b.id, legacy_b.id}


async def test_recruiter_sees_only_own_company(world, now):
    await make_offer(world.db, world.company_a, world.category)
    offer_c = await make_offer(world.db, world.company_c, world.category, status=OfferStatus.REJECTED)
    owner_c = await world.actor(world.owner_c)

    page = await OfferQueryService(world.db).list(audience=Audience.RECRUITER, actor=owner_c, now=now)

    assert ids(page) == {offer_c.id}


async def test_recruiter_cannot_filter_into_foreign_company(world, now):
    await make_offer(world.db, world.company_c, world.category)
    cm = await world.actor(world.cm)

    with pytest.raises(Forbidden):
        await OfferQueryService(world.db).list(
            OfferFilters(company_id=world.company_c.id), audience=Audience.RECRUITER, actor=cm, now=now
        )


async def test_identity_audiences_require_actor(world, now):
    service = OfferQueryService(world.db)
    with pytest.raises(Forbidden):
        await service.list(audience=Audience.RECRUITER, now=now)

    owner = await world.actor(world.owner_a)
    with pytest.raises(Forbidden):
        await service.list(audience=Audience.ADMIN, actor=owner, now=now)


async def test_admin_sees_everything(world, now):
    for status in (OfferStatus.DRAFT, OfferStatus.REJECTED, OfferStatus.PUBLISHED, OfferStatus.CLOSED):
        await make_offer(world.db, world.company_c, world.category, status=status)
    admin = await world.actor(world.admin)

    page = await OfferQueryService(world.db).list(audience=Audience.ADMIN, actor=admin, now=now)

    assert page.total == 4


async def test_company_filter_goes_through_owning_user(world, now):
    linked = await make_offer(world.db, world.company_b, world.category)
    legacy = await make_offer(world.db, world.company_b, world.category, link_company=False)
    await make_offer(world.db, world.company_a, world.category)
    admin = await world.actor(world.admin)
    service = OfferQueryService(world.db)

    page = await service.list(
        OfferFilters(company_id=world.company_b.id), audience=Audience.ADMIN, actor=admin, now=now
    )
    assert ids(page) == {linked.id, legacy.id}

    with pytest.raises(NotFound):
        await service.list(OfferFilters(company_id=uuid.uuid4()), audience=Audience.ADMIN, actor=admin, now=now)


async def test_sponsored_filter_follows_featured_window(world, now, monkeypatch):
    offer = await make_offer(world.db, world.company_a, world.category, status=OfferStatus.PUBLISHED)
    plain = await make_offer(world.db, world.company_b, world.category, status=OfferStatus.PUBLISHED)
    admin = await world.actor(world.admin)
    await OfferLifecycle(world.db).mark_featured(admin, offer.id, level=2, duration_days=5, now=now)
    service = OfferQueryService(world.db)
    featured = OfferFilters(sponsored="yes")
    not_featured = OfferFilters(sponsored="no")

    assert ids(await service.list(featured, now=now)) == {offer.id}
    assert ids(await service.list(not_featured, now=now)) == {plain.id}

    # Past the window the offer is no longer featured, even before a sweep clears it
    later = now + timedelta(days=6)
    monkeypatch.setattr(settings, "SWEEP_ON_READ", False)
    assert ids(await service.list(featured, now=later)) == set()
    assert ids(await service.list(not_featured, now=later)) == {offer.id, plain.id}

    monkeypatch.setattr(settings, "SWEEP_ON_READ", True)
    page = await service.list(featured, now=later)
    assert page.total == 0
    assert page.sweep.unfeatured_count == 1
    await world.db.refresh(offer)
    assert offer.sponsored_level == 0
    assert offer.featured_until is None


async def test_sponsored_level_filters(world, now):
    for level in (0, 1, 2, 3):
        await make_offer(
            world.db, world.company_a, world.category, status=OfferStatus.PUBLISHED, sponsored_level=level
        )
    service = OfferQueryService(world.db)

    assert (await service.list(OfferFilters(sponsored_level=2), now=now)).total == 1
    assert (await service.list(OfferFilters(sponsored_level_min=2), now=now)).total == 2


async def test_text_and_attribute_filters(world, now):
    match = await make_offer(
        world.db,
        world.company_a,
        world.category,
        status=OfferStatus.PUBLISHED,
        title="Python engineer",
        location="Remote - Lisbon",
        experience="Senior",
        offer_kind=OfferKind.JOB,
    )
    await make_offer(
        world.db,
        world.company_a,
        world.category,
        status=OfferStatus.PUBLISHED,
        title="Marketing intern",
        description="Campaigns",
        location="Paris",
        experience="Junior",
        offer_kind=OfferKind.INTERNSHIP,
    )
    service = OfferQueryService(world.db)

    assert ids(await service.list(OfferFilters(location="lisbon"), now=now)) == {match.id}
    assert ids(await service.list(OfferFilters(search="PYTHON"), now=now)) == {match.id}
    assert ids(await service.list(OfferFilters(search="offers api"), now=now)) == {match.id}
    assert ids(await service.list(OfferFilters(experience="sen"), now=now)) == {match.id}
    assert ids(await service.list(OfferFilters(offer_kind=OfferKind.JOB), now=now)) == {match.id}
    assert (await service.list(OfferFilters(recruiter_id=world.owner_b.id), now=now)).total == 0
    assert (await service.list(OfferFilters(category_id=uuid.uuid4()), now=now)).total == 0


async def test_pagination_defaults_and_cap(world, now):
    for _ in range(17):
        await make_offer(world.db, world.company_a, world.category, status=OfferStatus.PUBLISHED)
    service = OfferQueryService(world.db)

    first = await service.list(now=now)
    assert (first.size, first.total, first.pages, len(first.items)) == (settings.DEFAULT_PAGE_SIZE, 17, 2, 15)

    second = await service.list(pagination=Pagination(page=2), now=now)
    assert len(second.items) == 2
    assert not ids(first) & ids(second)

    capped = await service.list(pagination=Pagination(size=10_000), now=now)
    assert capped.size == settings.MAX_PAGE_SIZE


async def test_published_ordering(world, now):
    older = await make_offer(
        world.db,
        world.company_a,
        world.category,
        status=OfferStatus.PUBLISHED,
        publication_date=date.today() - timedelta(days=5),
    )
    newer = await make_offer(
        world.db,
        world.company_a,
        world.category,
        status=OfferStatus.PUBLISHED,
        publication_date=date.today() - timedelta(days=1),
    )

    page = await OfferQueryService(world.db).list(ordering=OfferOrdering.PUBLISHED, now=now)

    assert [offer.id for offer in page.items] == [newer.id, older.id]


async def test_featured_slot(world, now):
    gold = await make_offer(
        world.db,
        world.company_a,
        world.category,
        status=OfferStatus.PUBLISHED,
        sponsored_level=3,
        featured_until=now + timedelta(days=2),
    )
    silver = await make_offer(world.db, world.company_b, world.category, status=OfferStatus.PUBLISHED, sponsored_level=1)
    await make_offer(world.db, world.company_c, world.category, status=OfferStatus.DRAFT, sponsored_level=3)
    await make_offer(world.db, world.company_c, world.category, status=OfferStatus.PUBLISHED)

    offers = await OfferQueryService(world.db).featured(now=now)

    assert [offer.id for offer in offers] == [gold.id, silver.id]


async def test_status_counts(world, now):
    await make_offer(world.db, world.company_a, world.category, status=OfferStatus.DRAFT)
    await make_offer(world.db, world.company_b, world.category, status=OfferStatus.PUBLISHED, sponsored_level=1)
    await make_offer(world.db, world.company_c, world.category, status=OfferStatus.PUBLISHED)
    service = OfferQueryService(world.db)

    cm_stats = await service.status_counts(await world.actor(world.cm), Audience.RECRUITER, now=now)
    assert cm_stats.total == 2
    assert cm_stats.by_status["draft"] == 1
    assert cm_stats.by_status["published"] == 1
    assert cm_stats.sponsored_active == 1

    admin_stats = await service.status_counts(await world.actor(world.admin), Audience.ADMIN, now=now)
    assert admin_stats.total == 3
    assert admin_stats.by_status["published"] == 2


async def test_get_applies_audience(world, now):
    live = await make_offer(world.db, world.company_a, world.category, status=OfferStatus.PUBLISHED)
    draft = await make_offer(world.db, world.company_a, world.category)
    service = OfferQueryService(world.db)

    assert (await service.get(live.id, now=now)).id == live.id
    with pytest.raises(NotFound):
        await service.get(draft.id, now=now)

    owner = await world.actor(world.owner_a)
    assert (await service.get(draft.id, actor=owner, audience=Audience.RECRUITER, now=now)).id == draft.id


async def test_status_counts_sweep_expired_offers_first(world, now):
    stale = await make_offer(
        world.db,
        world.company_a,
        world.category,
        status=OfferStatus.PUBLISHED,
        expiration_date=now.date() - timedelta(days=2),
    )
    owner = await world.actor(world.owner_a)

    stats = await OfferQueryService(world.db).status_counts(owner, Audience.RECRUITER, now=now)

    assert stats.by_status["published"] == 0
    assert stats.by_status["closed"] == 1
    await world.db.refresh(stale)
    assert stale.status == OfferStatus.CLOSED


async def test_status_counts_without_sweep_on_read(world, now, monkeypatch):
    await make_offer(
        world.db,
        world.company_a,
        world.category,
        status=OfferStatus.PUBLISHED,
        expiration_date=now.date() - timedelta(days=2),
    )
    monkeypatch.setattr(settings, "SWEEP_ON_READ", False)
    admin = await world.actor(world.admin)

    stats = await OfferQueryService(world.db).status_counts(admin, Audience.ADMIN, now=now)

    assert stats.by_status["published"] == 1
