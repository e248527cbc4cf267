import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing-only")
os.environ["ENVIRONMENT"] = "development"

from typing import AsyncGenerator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.activities.audit_service import ActivityLogger, get_activity_logger  # noqa: E402
from app.auth.models import User  # noqa: E402
from app.auth.security import hash_password  # noqa: E402
from app.db.init_db import create_tables  # noqa: E402
from app.db.session import get_db, make_engine  # noqa: E402
from app.main import app  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "Secret123"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test; StaticPool keeps every session on the same connection."""
    engine = make_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, one DB session per request like production."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_activity_logger] = lambda: ActivityLogger(session_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make_user(
        email: str,
        role: str = "student",
        name: str = "Test User",
        password: str = TEST_PASSWORD,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            is_active=True,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


async def login(client: AsyncClient, email: str, password: str = TEST_PASSWORD) -> None:
    response = await client.post("/api/users/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text


@pytest.fixture()
async def admin(make_user) -> User:
    return await make_user("admin@school.org", role="admin", name="Ada Admin")


@pytest.fixture()
async def teacher(make_user) -> User:
    return await make_user("teacher@school.org", role="teacher", name="Tom Teacher")


@pytest.fixture()
async def admin_client(client: AsyncClient, admin: User) -> AsyncClient:
    await login(client, admin.email)
    return client


class RecordingLogger:
    """Stands in for a module's structlog logger and keeps every event."""

    def __init__(self) -> None:
        self.events = []

    def info(self, event: str, **kwargs) -> None:
        self.events.append((event, kwargs))

    def exception(self, event: str, **kwargs) -> None:
        self.events.append((event, kwargs))
