import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Load .env.test for tests if present (e.g. to point TEST_DATABASE_URL at a
# local Postgres); otherwise every test gets its own SQLite file.
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

# Settings require DATABASE_URL; the app engine is never connected in tests.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./knitkits-test.db")
os.environ.setdefault("ENVIRONMENT", "development")

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.marketplace_service import models as _marketplace_models  # noqa: F401
from services.marketplace_service.app.main import app
from services.marketplace_service.policies import build_registry

# Clear cached settings to reload with new env vars
get_settings.cache_clear()


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Create a fresh database per test.

    SQLite only enforces ON DELETE CASCADE with the foreign_keys pragma on.
    """
    db_url = os.environ.get(
        "TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'knitkits.db'}"
    )
    engine = create_async_engine(db_url, future=True)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session configured like the application's.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def core_registry():
    return build_registry(["core"])


@pytest.fixture
def marketplace_registry():
    return build_registry(["core", "marketplace"])


@pytest.fixture
def use_marketplace_policies(monkeypatch, marketplace_registry):
    """
    Make request-scoped repositories use the core + marketplace policy sets.
    """
    monkeypatch.setattr(
        "services.marketplace_service.services.repository.get_policy_registry",
        lambda: marketplace_registry,
    )
    return marketplace_registry


@pytest.fixture
def login():
    """
    Return a function that makes requests run as the given user.

    Accepts a ``User`` row or a bare user id.
    """

    def _login(user_or_id):
        user_id = getattr(user_or_id, "id", user_or_id)
        email = getattr(user_or_id, "email", None)

        def mock_user():
            return AuthUser(sub=str(user_id), email=email)

        app.dependency_overrides[get_current_user] = mock_user

    return _login


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the app and overridden DB dependency.
    """
    app.dependency_overrides[get_async_db] = lambda: db_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
