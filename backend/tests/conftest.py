"""
Pytest fixtures for testing.
"""
import os

# Settings are read at import time; these must be set before jobly is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "secret-test")
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
import pytest_asyncio
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import jobly.database
from jobly.database import Base, build_engine
# Import ALL models so Base.metadata knows about all tables
from jobly.models import Application, Company, Job, User
from jobly.utils.jwt_handler import create_token
from jobly.utils.password_hash import hash_password

# Now import app (after we can override database)
from jobly.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.

    StaticPool keeps a single connection, so the app's sessions and the
    test's session see the same in-memory database.
    """
    test_engine = build_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Replace the app's engine and sessionmaker; get_db() reads them per request
    original_engine = jobly.database.engine
    original_sessionmaker = jobly.database.AsyncSessionLocal

    jobly.database.engine = test_engine
    jobly.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    session = jobly.database.AsyncSessionLocal()

    try:
        yield session
    finally:
        await session.close()
        await test_engine.dispose()
        jobly.database.engine = original_engine
        jobly.database.AsyncSessionLocal = original_sessionmaker


@pytest_asyncio.fixture
async def async_client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing endpoints.

    The db fixture already replaced jobly.database.engine with the test
    engine, so all endpoints use the test database.
    """
    transport = ASGITransport(app=fastapi_app)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def seed(db: AsyncSession) -> dict[str, int]:
    """
    Five companies, six jobs (five at c1, one at d1), users u1-u3 and admin u4.

    u1 has applied to j1-c1. Returns job title -> id.
    """
    for number, handle in enumerate(["c1", "c2", "c3", "d1", "e1"], start=1):
        db.add(Company(
            handle=handle,
            name=handle.upper(),
            num_employees=number,
            description=f"Desc {handle}",
            logo_url=f"http://{handle}.img",
        ))
    await db.flush()

    jobs = [
        Job(title="j1-c1", salary=10000, equity=0, company_handle="c1"),
        Job(title="j2-c1", salary=20000, equity=None, company_handle="c1"),
        Job(title="j3-c1", salary=30000, equity=0.02, company_handle="c1"),
        Job(title="j4-c1", salary=40000, equity=None, company_handle="c1"),
        Job(title="j5-c1", company_handle="c1"),
        Job(title="j1-d1", salary=35000, equity=0.01, company_handle="d1"),
    ]
    db.add_all(jobs)

    for number in range(1, 5):
        db.add(User(
            username=f"u{number}",
            password=hash_password(f"password{number}"),
            first_name=f"U{number}F",
            last_name=f"U{number}L",
            email=f"user{number}@user.com",
            is_admin=number == 4,
        ))
    await db.flush()

    job_ids = {job.title: job.id for job in jobs}
    db.add(Application(username="u1", job_id=job_ids["j1-c1"]))
    await db.commit()

    return job_ids


def bearer(username: str, is_admin: bool = False) -> dict[str, str]:
    """Authorization header for a token issued to `username`."""
    return {"Authorization": f"Bearer {create_token(username, is_admin)}"}


@pytest.fixture
def u1_headers() -> dict[str, str]:
    return bearer("u1")


@pytest.fixture
def u2_headers() -> dict[str, str]:
    return bearer("u2")


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return bearer("u4", is_admin=True)
