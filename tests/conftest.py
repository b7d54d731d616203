"""pytest fixtures for topicbox tests.

Provides:
- database_url: Session-scoped PostgreSQL URL with migrations applied
  (TEST_DATABASE_URL when set, otherwise a testcontainer instance)
- utc_timezone: Autouse fixture enforcing UTC timezone
- session: Function-scoped database session with table cleanup
- uow_factory: Function-scoped UnitOfWork factory
- client / admin_headers: API client wired to the test database
- make_topic / make_entry: Persisted fixtures for repository and route tests
"""

import os

# Settings skip the required-variable check in tests; must precede app imports
os.environ.setdefault("APP_ENV", "test")

import subprocess
import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from topicbox.api.auth import BearerTokenAuthorizer
from topicbox.core.database import setup_db_session
from topicbox.models import Entry, Topic
from topicbox.services.platform_username import LocalPlatformUsernameChecker
from topicbox.services.topic_locks import TopicLocks
from topicbox.uow import create_uow_factory

PROJECT_ROOT = Path(__file__).resolve().parent.parent

ADMIN_TOKEN = "test-admin-token"

# Valid EIP-55 addresses (EIP-55 test vectors)
WALLET_A = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
WALLET_B = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
WALLET_C = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"


def _apply_migrations(db_url: str) -> None:
    """Run alembic in a subprocess (avoids asyncio event loop conflicts)."""
    env = os.environ.copy()
    env["DATABASE_URL"] = db_url
    env["APP_ENV"] = "test"
    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        check=True,
        capture_output=True,
        text=True,
        env=env,
        cwd=PROJECT_ROOT,
    )


@pytest.fixture(scope="session")
def database_url():
    """Provide a session-scoped PostgreSQL URL with migrations applied.

    TEST_DATABASE_URL points the suite at an existing database (CI service
    containers). Otherwise a postgres testcontainer starts once per session.
    """
    external_url = os.environ.get("TEST_DATABASE_URL")
    if external_url:
        _apply_migrations(external_url)
        yield external_url
        return

    from testcontainers.postgres import PostgresContainer

    with PostgresContainer(
        image="postgres:17",
        username="test",
        password="test",
        dbname="test_topicbox",
    ) as container:
        db_url = container.get_connection_url(driver="psycopg")
        _apply_migrations(db_url)
        yield db_url


@pytest.fixture(scope="session", autouse=True)
def utc_timezone():
    """Enforce UTC timezone for all tests."""
    os.environ["TZ"] = "UTC"
    yield


@pytest_asyncio.fixture(scope="function")
async def session(database_url) -> AsyncGenerator[AsyncSession, None]:
    """Provide function-scoped database session with table cleanup.

    Each test gets a fresh session; tables are emptied after the test.
    """
    session_factory = setup_db_session(database_url, pool_size=5)

    async with session_factory() as session:
        yield session

        # Rollback any uncommitted changes from the test
        await session.rollback()

        # Dependent table first
        await session.execute(text("DELETE FROM entries"))
        await session.execute(text("DELETE FROM topics"))
        await session.commit()

    await session.bind.dispose()


@pytest_asyncio.fixture(scope="function")
async def uow_factory(session: AsyncSession):
    """Provide function-scoped UnitOfWork factory bound to the test engine."""
    session_factory = async_sessionmaker(
        bind=session.bind,
        expire_on_commit=False,
    )
    return create_uow_factory(session_factory)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest_asyncio.fixture
async def client(uow_factory, session):
    """Provide AsyncClient for testing API endpoints with database access.

    ASGITransport does not run the lifespan, so app.state collaborators are set here.
    """
    from topicbox.app import app

    app.state.session_factory = async_sessionmaker(bind=session.bind, expire_on_commit=False)
    app.state.uow_factory = uow_factory
    app.state.platform_checker = LocalPlatformUsernameChecker()
    app.state.authorizer = BearerTokenAuthorizer(ADMIN_TOKEN)
    app.state.topic_locks = TopicLocks()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_topic(session: AsyncSession):
    """Persist a topic and return it."""

    async def _make(name: str = "Airdrop", description: str = "Spring campaign", **kwargs):
        topic = Topic(name=name, description=description, **kwargs)
        session.add(topic)
        await session.commit()
        return topic

    return _make


@pytest_asyncio.fixture
async def make_entry(session: AsyncSession):
    """Persist an entry for a topic and return it."""

    async def _make(topic: Topic, **overrides):
        fields = {
            "topic_id": topic.id,
            "topic_name": topic.name,
            "telegram_username": "@alice",
            "platform_username": "alice.dev",
            "wallet_address": WALLET_A,
            "discord_username": None,
            "email": "alice@example.com",
        }
        fields.update(overrides)
        entry = Entry(**fields)
        session.add(entry)
        await session.commit()
        return entry

    return _make
