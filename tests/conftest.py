"""Pytest configuration and shared fixtures"""

import pytest
import os
import sys
from typing import AsyncGenerator, Callable, Awaitable
from datetime import date
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from billing.models.database import Base
from billing.models import db_models  # noqa: F401  (registers tables)
from billing.models.db_models import Job as JobDB, Profile as ProfileDB
from billing.models.db_utils import db_to_pydantic_job, db_to_pydantic_profile
from billing.models.job import Job, Profile


# Test database setup (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test

    Yields:
        Async database session
    """
    # Create tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Create session
    async with TestingSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

    # Drop tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def subcontractor(db_session) -> Profile:
    """Subcontractor profile with a two-line address"""
    profile = ProfileDB(
        id="sub-1",
        company_name="Acme Builders Sdn Bhd",
        contact_person="Aina Rahman",
        phone_number="+60 12-345 6789",
        address="12 Jalan Example\n50000 Kuala Lumpur",
        role="subcontractor",
    )
    db_session.add(profile)
    await db_session.commit()
    return db_to_pydantic_profile(profile)


@pytest.fixture
async def other_subcontractor(db_session) -> Profile:
    profile = ProfileDB(id="sub-2", company_name="Other Works", role="subcontractor")
    db_session.add(profile)
    await db_session.commit()
    return db_to_pydantic_profile(profile)


@pytest.fixture
async def admin(db_session) -> Profile:
    profile = ProfileDB(id="admin-1", company_name="Head Office", role="admin")
    db_session.add(profile)
    await db_session.commit()
    return db_to_pydantic_profile(profile)


@pytest.fixture
def make_job(db_session) -> Callable[..., Awaitable[Job]]:
    """
    Factory inserting a job row directly, bypassing validation

    Lets tests store the loosely typed line_items payloads found in
    older rows (single objects, alternate keys, strings, nulls).
    """
    async def _make_job(
        subcontractor_id: str,
        line_items=None,
        status: str = "pending",
        job_type: str = "Wiring",
        location: str = "Site A",
        job_id: str = None,
    ) -> Job:
        job = JobDB(
            subcontractor_id=subcontractor_id,
            job_type=job_type,
            location=location,
            start_date=date(2026, 1, 5),
            status=status,
            line_items=line_items,
        )
        if job_id:
            job.id = job_id
        db_session.add(job)
        await db_session.commit()
        await db_session.refresh(job)
        return db_to_pydantic_job(job)

    return _make_job


@pytest.fixture
def sample_line_items() -> list:
    """Scenario: two well-formed items totalling 150"""
    return [
        {"description": "Wiring", "quantity": 10, "unit_price": 5},
        {"description": "Fixtures", "quantity": 2, "unit_price": 50},
    ]
