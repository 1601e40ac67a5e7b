import socket
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.core.identifiers import NotificationChannel
from app.models.base import Base
from app.providers import factory
from app.providers.identity.mock_adapter import MockIdentityDirectory
from app.providers.notifier.base import NotifierRegistry
from app.providers.notifier.mock_adapter import MockNotifier
from app.repositories.deletion_request_repository import (
    InMemoryDeletionRequestRepository,
)
from app.services.account_deletion_service import AccountDeletionService

# Use separate test database
TEST_DATABASE_URL = settings.database_url.replace(
    settings.database_name, f"{settings.database_name}_test"
)

# Known principals for service and API tests
TEST_EMAIL = "shopper@example.com"
TEST_PHONE = "919876543210"

# Fixed issuance instant; clock fixture starts here
TEST_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _is_postgres_available() -> bool:
    """Check if PostgreSQL is accepting connections.

    Returns:
        True if PostgreSQL is reachable on port 5432, False otherwise.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("127.0.0.1", 5432))
        sock.close()
        return result == 0
    except OSError:
        return False


# Check once at module load time
_POSTGRES_AVAILABLE = _is_postgres_available()


def skip_if_no_postgres() -> None:
    """Skip test if PostgreSQL is not available.

    Called by fixtures that require database connection.
    Provides clear skip message to help diagnose CI/local issues.
    """
    if not _POSTGRES_AVAILABLE:
        pytest.skip(
            "PostgreSQL not available on port 5432. "
            "Start database with: docker compose up -d"
        )


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine.

    Skips test if PostgreSQL is not available (e.g., Docker not running).
    """
    skip_if_no_postgres()

    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


# =============================================================================
# In-memory deletion flow (no database, no network)
# =============================================================================


class FakeClock:
    """Controllable UTC clock; call it to read, advance() to move it."""

    def __init__(self, start: datetime = TEST_NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def request_store() -> InMemoryDeletionRequestRepository:
    return InMemoryDeletionRequestRepository()


@pytest.fixture
def directory() -> MockIdentityDirectory:
    """Directory holding one email principal and one phone principal."""
    mock = MockIdentityDirectory()
    mock.add_principal(TEST_EMAIL, retained_records=2)
    mock.add_principal(TEST_PHONE)
    return mock


@pytest.fixture
def chat_notifier() -> MockNotifier:
    return MockNotifier(NotificationChannel.CHAT)


@pytest.fixture
def email_notifier() -> MockNotifier:
    return MockNotifier(NotificationChannel.EMAIL)


@pytest.fixture
def notifiers(chat_notifier, email_notifier) -> NotifierRegistry:
    return NotifierRegistry([chat_notifier, email_notifier])


@pytest.fixture
def deletion_service(
    request_store, directory, notifiers, clock
) -> AccountDeletionService:
    """AccountDeletionService over in-memory collaborators."""
    return AccountDeletionService(
        requests=request_store,
        directory=directory,
        notifiers=notifiers,
        clock=clock,
    )


@pytest_asyncio.fixture
async def api_client(deletion_service) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the API with the in-memory deletion service injected.

    Yields:
        AsyncClient bound to a fresh app through ASGITransport.
    """
    from app.api.deps import get_account_deletion_service
    from app.main import create_app

    app = create_app()
    app.dependency_overrides[get_account_deletion_service] = lambda: deletion_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Global test isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_provider_singletons() -> Iterator[None]:
    """Reset the notifier registry singleton around each test."""
    factory.reset_providers()
    yield
    factory.reset_providers()


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Disable rate limiting during tests.

    Security: Rate limiting is tested separately; disable for other tests
    to avoid flaky failures from rate limit triggers.

    Yields:
        None (autouse fixture).
    """
    from app.core.rate_limiting import limiter

    # Store original state and disable
    original_enabled = limiter.enabled
    limiter.enabled = False

    yield

    # Restore original state
    limiter.enabled = original_enabled
