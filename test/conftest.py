"""
Pytest configuration and fixtures for Tenant IAM tests
"""

import os

# Settings are read at import time, so the environment goes first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-signing-tokens")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DEBUG", "false")

from collections.abc import AsyncGenerator  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from main import create_app  # noqa: E402
from tenant_iam.auth import create_access_token, hash_password  # noqa: E402
from tenant_iam.database import Base, get_db  # noqa: E402
from tenant_iam.models import Role, Tenant, User, UserRole  # noqa: E402
from tenant_iam.seed import seed_database  # noqa: E402
from tenant_iam.services.auth_service import build_claims  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "Str0ng!Pass"  # nosec B105


async def load_user(db: AsyncSession, username: str) -> User:
    result = await db.execute(
        select(User).where(User.username == username).execution_options(populate_existing=True)
    )
    return result.scalars().one()


async def add_user(
    db: AsyncSession,
    username: str,
    password: str = DEFAULT_PASSWORD,
    tenant_id: str | None = None,
    roles: tuple[str, ...] | list[str] = (),
    is_active: bool = True,
) -> User:
    """Insert a user holding the named global roles and return it fully loaded."""
    role_rows = []
    if roles:
        result = await db.execute(select(Role).where(Role.name.in_(list(roles)), Role.tenant_id.is_(None)))
        role_rows = list(result.scalars().unique().all())

    user = User(
        username=username,
        password_hash=hash_password(password),
        tenant_id=tenant_id,
        is_active=is_active,
    )
    user.user_roles = [UserRole(role=role) for role in role_rows]
    db.add(user)
    await db.commit()
    return await load_user(db, username)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(session_factory) -> SimpleNamespace:
    """
    Seeded catalogue plus two tenants:

    - Acme Corp: companyadmin (COMPANY_ADMIN), clientuser (CLIENT), acmeclient2 (CLIENT)
    - Globex:    globexadmin (COMPANY_ADMIN), globexclient (CLIENT)
    - global:    superadmin (SUPER_ADMIN)
    """
    async with session_factory() as db:
        await seed_database(db)

        acme = (await db.execute(select(Tenant).where(Tenant.name == "Acme Corp"))).scalars().one()
        globex = Tenant(name="Globex")
        db.add(globex)
        await db.commit()

        users = {name: await load_user(db, name) for name in ("superadmin", "companyadmin", "clientuser")}
        users["acmeclient2"] = await add_user(db, "acmeclient2", tenant_id=acme.id, roles=["CLIENT"])
        users["globexadmin"] = await add_user(db, "globexadmin", tenant_id=globex.id, roles=["COMPANY_ADMIN"])
        users["globexclient"] = await add_user(db, "globexclient", tenant_id=globex.id, roles=["CLIENT"])

        roles = {
            role.name: role
            for role in (await db.execute(select(Role).where(Role.tenant_id.is_(None)))).scalars().unique().all()
        }

    return SimpleNamespace(acme=acme, globex=globex, users=users, roles=roles)


@pytest.fixture
def headers_for():
    """Build Authorization headers carrying the session claims of a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(build_claims(user))}"}

    return _headers


@pytest.fixture
def app(session_factory):
    test_app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    test_app.dependency_overrides[get_db] = override_get_db
    yield test_app
    test_app.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
