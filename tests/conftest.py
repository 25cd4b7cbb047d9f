"""Shared pytest fixtures for the knowledge-base test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- test_settings: Settings with fixed secrets, no .env
- client: AsyncClient with session and settings overridden
- org / other_org, admin_user / normal_user / other_admin: seeded rows
- admin_headers / user_headers / other_admin_headers: bearer headers
- local_token / idp_token: token signers using the test secrets
"""

from datetime import timedelta

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from src.auth.passwords import hash_password
from src.auth.tokens import issue_token
from src.config.settings import Settings, get_settings
from src.db.session import Base, get_async_session
import src.db.tables  # noqa: F401 - register ORM models on Base.metadata
from src.db.tables import OrganizationRow, UserRow
from src.models.common import new_uuid7, utc_now
from src.repositories.organizations import OrganizationRepository
from src.repositories.users import UserRepository

TEST_JWT_SECRET = "test-local-secret-0123456789abcdef"
TEST_IDP_SECRET = "test-idp-secret-0123456789abcdefgh"
TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio (the DB drivers are asyncio-only)."""
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed - it rolls back at teardown.
    Application code calling session.commit() triggers a SAVEPOINT release,
    which is then restarted so subsequent operations stay in the same
    outer transaction.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        nested = await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(sync_session, transaction):  # noqa: ARG001
            nonlocal nested
            if transaction.nested and not transaction._parent.nested:
                nested = conn.sync_connection.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        JWT_SECRET=TEST_JWT_SECRET,
        IDP_JWT_SECRET=TEST_IDP_SECRET,
        IDP_ALLOW_UNVERIFIED_DECODE=False,
        SEED_ON_STARTUP=False,
    )


@pytest.fixture
async def client(db_session, test_settings):
    """AsyncClient with the session and settings dependencies overridden."""
    from src.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seeded tenants and accounts
# ---------------------------------------------------------------------------


async def make_org(session: AsyncSession, slug: str) -> OrganizationRow:
    return await OrganizationRepository(session).create(
        organization_id=new_uuid7(), name=slug.title(), slug=slug,
    )


async def make_user(session: AsyncSession, org: OrganizationRow, email: str,
                    role: str = "USER", status: str = "ACTIVE") -> UserRow:
    return await UserRepository(session).create(
        user_id=new_uuid7(),
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        first_name=email.split("@")[0].title(),
        last_name="Tester",
        role=role,
        status=status,
        organization_id=org.organization_id,
    )


def bearer_for(user: UserRow) -> dict[str, str]:
    token = issue_token(
        user_id=str(user.user_id),
        email=user.email,
        role=user.role,
        org_id=str(user.organization_id),
        secret=TEST_JWT_SECRET,
        expires_minutes=60,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def org(db_session) -> OrganizationRow:
    return await make_org(db_session, "acme")


@pytest.fixture
async def other_org(db_session) -> OrganizationRow:
    return await make_org(db_session, "globex")


@pytest.fixture
async def admin_user(db_session, org) -> UserRow:
    return await make_user(db_session, org, "admin@acme.test", role="ADMIN")


@pytest.fixture
async def normal_user(db_session, org) -> UserRow:
    return await make_user(db_session, org, "user@acme.test")


@pytest.fixture
async def other_admin(db_session, other_org) -> UserRow:
    return await make_user(db_session, other_org, "admin@globex.test", role="ADMIN")


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    return bearer_for(admin_user)


@pytest.fixture
def user_headers(normal_user) -> dict[str, str]:
    return bearer_for(normal_user)


@pytest.fixture
def other_admin_headers(other_admin) -> dict[str, str]:
    return bearer_for(other_admin)


@pytest.fixture
def account_factory(db_session):
    """Async factory: await account_factory(org, email, role=..., status=...)."""

    async def _make(org: OrganizationRow, email: str, role: str = "USER",
                    status: str = "ACTIVE") -> UserRow:
        return await make_user(db_session, org, email, role=role, status=status)

    return _make


@pytest.fixture
def headers_for():
    """Build bearer headers for any seeded user."""
    return bearer_for


@pytest.fixture
def user_password() -> str:
    """Plain-text password of every account made by make_user."""
    return TEST_PASSWORD


@pytest.fixture
def local_token():
    """Sign a local token with the test JWT secret."""

    def _issue(*, user_id: str, email: str, role: str, org_id: str | None,
               expires_minutes: int = 60) -> str:
        return issue_token(
            user_id=user_id, email=email, role=role, org_id=org_id,
            secret=TEST_JWT_SECRET, expires_minutes=expires_minutes,
        )

    return _issue


@pytest.fixture
def idp_token():
    """Sign an identity-provider token (HS256, one hour, aud=authenticated)."""

    def _issue(claims: dict, secret: str = TEST_IDP_SECRET) -> str:
        payload = {
            "exp": utc_now() + timedelta(hours=1),
            "aud": "authenticated",
            **claims,
        }
        return jwt.encode(payload, secret, algorithm="HS256")

    return _issue
