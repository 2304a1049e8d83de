import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Tests never talk to real providers; pin the settings that decide that
os.environ.update(
    {
        "ENVIRONMENT": "test",
        "DATABASE_URL": "sqlite+aiosqlite:///./test_store.db",
        "ADMIN_ROLE_SOURCE": "claims",
        "AUTH_JWT_SECRET": "test-jwt-secret",
        "RESEND_API_KEY": "",
        "IDENTITY_API_KEY": "",
    }
)

from libs.auth.dependencies import get_current_user  # noqa: E402
from libs.auth.identity import clear_role_cache  # noqa: E402
from libs.auth.models import AuthUser  # noqa: E402
from libs.common.config import get_settings  # noqa: E402
from libs.common.locks import product_locks  # noqa: E402
from libs.db.base import Base  # noqa: E402
from libs.db.config import install_sqlite_pragmas  # noqa: E402
from libs.db.session import get_async_db  # noqa: E402
from services.store_service import models as _store_models  # noqa: E402,F401
from services.store_service.app.main import app  # noqa: E402
from services.store_service.services import order_service  # noqa: E402

get_settings.cache_clear()
settings = get_settings()


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Locks bind to the event loop that first contends them; start each test clean."""
    product_locks.clear()
    order_service.order_locks.clear()
    clear_role_cache()
    yield
    product_locks.clear()
    order_service.order_locks.clear()
    clear_role_cache()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch) -> list[dict]:
    """Capture transactional emails instead of sending them."""
    sent: list[dict] = []

    async def _summary(to_email, buyer_name, order_id, items, total):
        sent.append(
            {"kind": "summary", "to": to_email, "order_id": order_id, "total": total}
        )
        return True

    async def _status(to_email, buyer_name, order_id, status, items, total):
        sent.append(
            {"kind": status, "to": to_email, "order_id": order_id, "total": total}
        )
        return True

    monkeypatch.setattr(order_service, "send_order_summary_email", _summary)
    monkeypatch.setattr(order_service, "send_order_status_email", _status)
    return sent


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    A throwaway SQLite database file per test, in WAL mode so several
    sessions can work against it concurrently.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    install_sqlite_pragmas(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def admin_user() -> AuthUser:
    return AuthUser(user_id="user_admin", email="admin@test.com", role="admin")


@pytest.fixture
def regular_user() -> AuthUser:
    return AuthUser(user_id="user_buyer", email="buyer@test.com")


def _client_for(session_factory, user=None) -> AsyncClient:
    async def _db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = _db
    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous client: public routes only."""
    async with _client_for(session_factory) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_client(session_factory, admin_user) -> AsyncGenerator[AsyncClient, None]:
    """Client signed in as a user whose token carries the admin role."""
    async with _client_for(session_factory, admin_user) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def member_client(session_factory, regular_user) -> AsyncGenerator[AsyncClient, None]:
    """Client signed in as an ordinary (non-admin) user."""
    async with _client_for(session_factory, regular_user) as ac:
        yield ac
    app.dependency_overrides.clear()
