"""
Shared fixtures for the Leafbase test suite.
"""
import os
from datetime import timedelta

# Keep module-level app creation off the production database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from leafbase.auth.jwt import TokenIssuer
from leafbase.auth.password import PasswordHasher
from leafbase.auth.store import CredentialStore
from leafbase.auth.users import UserService
from leafbase.database import create_engine, create_session_factory, init_models
from leafbase.main import create_app
from leafbase.settings import Settings

TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        jwt_secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        access_token_expire_minutes=60,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        log_level="WARNING",
    )


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer():
    return TokenIssuer(secret_key=TEST_SECRET, default_ttl=timedelta(hours=1))


@pytest_asyncio.fixture
async def db_session(settings):
    """A session on a fresh SQLite database with tables created."""
    engine = create_engine(settings.database_url)
    await init_models(engine)
    async with create_session_factory(engine)() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def user_service(db_session, hasher, issuer):
    return UserService(store=CredentialStore(db_session), hasher=hasher, issuer=issuer)


@pytest_asyncio.fixture
async def app(settings):
    # ASGITransport does not run the lifespan, so create tables here
    application = create_app(settings)
    await init_models(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
