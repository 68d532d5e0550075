"""
Shared fixtures: in-memory SQLite database, auth service, HTTP client.
"""

import os

# Must be set before app.config is imported anywhere
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_FORMAT"] = "console"

from typing import List, Tuple

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.core.deps import get_notifier, get_token_service
from app.core.security import PasswordHasher
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import User  # noqa: F401
from app.repositories.user_repository import UserRepository
from app.services.auth_service import AuthService
from app.services.notification_service import NotificationPurpose, Notifier

VALID_PASSWORD = "Passw0rd1"


class RecordingNotifier(Notifier):
    """Keeps every (recipient, token, purpose) it is asked to send."""

    def __init__(self):
        self.sent: List[Tuple[str, str, NotificationPurpose]] = []

    async def send(self, recipient, token, purpose):
        self.sent.append((recipient, token, purpose))

    def last_token(self, purpose: NotificationPurpose) -> str:
        tokens = [token for _, token, sent_purpose in self.sent if sent_purpose == purpose]
        assert tokens, f"no {purpose.value} token was sent"
        return tokens[-1]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def auth_service(db_session, notifier):
    return AuthService(
        UserRepository(db_session),
        PasswordHasher(rounds=4),
        get_token_service(),
        notifier,
        settings,
    )


@pytest.fixture
async def client(session_factory, notifier):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def registration(email: str = "ana@example.com", password: str = VALID_PASSWORD, **extra) -> dict:
    """Service-level registration fields."""
    fields = {"first_name": "Ana", "last_name": "Lee", "email": email, "password": password}
    fields.update(extra)
    return fields
