"""Expiry sweep: closing expired offers and ending sponsorship."""

from datetime import timedelta, timezone

import pytest

from app.models import OfferStatus
from app.services.offer_expiry_sweeper import OfferExpirySweeper
from tests.factories import make_offer


@pytest.mark.parametrize(
    "status,closes",
    [
        (OfferStatus.PUBLISHED, True),
        (OfferStatus.VALIDATED, True),
        (OfferStatus.DRAFT, True),
        (OfferStatus.PENDING_VALIDATION, True),
        (OfferStatus.REJECTED, False),
        (OfferStatus.CLOSED, False),
        (OfferStatus.EXPIRED, False),
    ],
)
async def test_sweep_closes_only_mutable_expired_offers(world, now, status, closes):
    offer = await make_offer(
        world.db, world.company_a, world.category, status=status, expiration_date=now.date() - timedelta(days=1)
    )

    result = await OfferExpirySweeper(world.db).sweep(now)

    await world.db.refresh(offer)
    assert result.closed_count == (1 if closes else 0)
    assert offer.status == (OfferStatus.CLOSED if closes else status)


async def test_offer_expiring_today_stays_open(world, now):
    offer = await make_offer(
        world.db, world.company_a, world.category, status=OfferStatus.PUBLISHED, expiration_date=now.date()
    )

    result = await OfferExpirySweeper(world.db).sweep(now)

    await world.db.refresh(offer)
    assert result.closed_count == 0
    assert offer.status == OfferStatus.PUBLISHED


async def test_sweep_clears_ended_sponsorship_only(world, now):
    ended = await make_offer(
        world.db, world.company_a, world.category, sponsored_level=2, featured_until=now - timedelta(minutes=1)
    )
    running = await make_offer(
        world.db, world.company_a, world.category, sponsored_level=3, featured_until=now + timedelta(days=1)
    )
    unbounded = await make_offer(world.db, world.company_b, world.category, sponsored_level=1)

    result = await OfferExpirySweeper(world.db).sweep(now)

    assert result.unfeatured_count == 1
    for offer in (ended, running, unbounded):
        await world.db.refresh(offer)
    assert (ended.sponsored_level, ended.featured_until) == (0, None)
    assert running.sponsored_level == 3
    assert unbounded.sponsored_level == 1
    assert unbounded.featured_until is None


async def test_sweep_is_idempotent(world, now):
    await make_offer(
        world.db,
        world.company_a,
        world.category,
        status=OfferStatus.PUBLISHED,
        expiration_date=now.date() - timedelta(days=3),
    )
    await make_offer(
        world.db, world.company_b, world.category, sponsored_level=1, featured_until=now - timedelta(hours=1)
    )
    sweeper = OfferExpirySweeper(world.db)

    first = await sweeper.sweep(now)
    second = await sweeper.sweep(now)

    assert (first.closed_count, first.unfeatured_count) == (1, 1)
    assert (second.closed_count, second.unfeatured_count) == (0, 0)
    assert not second.changed


async def test_sweep_accepts_aware_timestamps(world, now):
    offer = await make_offer(
        world.db, world.company_a, world.category, sponsored_level=1, featured_until=now - timedelta(seconds=30)
    )

    result = await OfferExpirySweeper(world.db).sweep(now.replace(tzinfo=timezone.utc))

    await world.db.refresh(offer)
    assert result.unfeatured_count == 1
    assert offer.sponsored_level == 0
