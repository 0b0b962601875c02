"""Test configuration and fixtures."""

import os

# Settings are read at import time; configure before importing the app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_offers.db"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SWEEP_ON_READ"] = "true"
os.environ["LOG_FORMAT"] = "console"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SENTRY_DSN"] = ""
os.environ["SECRET_KEY"] = "test-secret-key"

from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.db.base import Base
from app.utils.constants import ROLE_ADMIN, ROLE_CANDIDATE, ROLE_COMMUNITY_MANAGER
from app.utils.helpers import utcnow
from tests.factories import RecordingEventPublisher, World, assign, make_category, make_company, make_user


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite file database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'offers.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def now() -> datetime:
    return utcnow().replace(microsecond=0)


@pytest.fixture
def events() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
async def world(db) -> World:
    """
    Three validated companies A, B, C owned by three recruiters, one community
    manager assigned to A and B, an admin and a candidate.
    """
    admin = await make_user(db, "admin@example.com", [ROLE_ADMIN])
    owner_a = await make_user(db, "alice@example.com")
    owner_b = await make_user(db, "bob@example.com")
    owner_c = await make_user(db, "carol@example.com")
    cm = await make_user(db, "cm@example.com", [ROLE_COMMUNITY_MANAGER])
    candidate = await make_user(db, "dan@example.com", [ROLE_CANDIDATE])

    company_a = await make_company(db, owner_a, "Acme")
    company_b = await make_company(db, owner_b, "Bolt")
    company_c = await make_company(db, owner_c, "Crane")
    await assign(db, company_a, cm)
    await assign(db, company_b, cm)

    category = await make_category(db)

    return World(
        db=db,
        admin=admin,
        owner_a=owner_a,
        owner_b=owner_b,
        owner_c=owner_c,
        cm=cm,
        candidate=candidate,
        company_a=company_a,
        company_b=company_b,
        company_c=company_c,
        category=category,
    )
