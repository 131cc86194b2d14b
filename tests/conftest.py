import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.api.db.database import get_db
from app.api.modules.v1.departments.models.department_model import Department
from app.api.modules.v1.tickets.models.ticket_model import Ticket  # noqa: F401
from app.api.modules.v1.users.models.users_model import User, UserRole
from app.api.modules.v1.users.service.user import UserCRUD
from app.api.utils.jwt import create_access_token
from app.api.utils.password import hash_password
from main import app

TEST_DATABASE_URL = "sqlite+aiosqlite://"

DEFAULT_PASSWORD = "password123"


@pytest_asyncio.fixture
async def test_session():
    """Create all tables on a fresh in-memory database and yield a session."""
    # StaticPool keeps the single in-memory connection shared across sessions.
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(test_session):
    """HTTP client bound to the app, with ``get_db`` pointed at the test session."""

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(test_session):
    """Factory creating persisted users; emails are unique per call."""
    counter = {"n": 0}

    async def _make_user(
        role: UserRole = UserRole.CUSTOMER,
        email: str = None,
        password: str = DEFAULT_PASSWORD,
        is_active: bool = True,
        first_name: str = "Test",
    ) -> User:
        counter["n"] += 1
        user = await UserCRUD.create_user(
            db=test_session,
            email=email or f"{role.value}{counter['n']}@example.com",
            first_name=first_name,
            last_name="User",
            hashed_password=hash_password(password),
            role=role,
            is_active=is_active,
        )
        await test_session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def department(test_session):
    dept = Department(name="IT")
    test_session.add(dept)
    await test_session.commit()
    await test_session.refresh(dept)
    return dept


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN, email="admin@example.com")


@pytest_asyncio.fixture
async def agent(make_user):
    return await make_user(UserRole.AGENT, email="agent@example.com")


@pytest_asyncio.fixture
async def customer(make_user):
    return await make_user(UserRole.CUSTOMER, email="customer@example.com")


def auth_headers_for(user: User) -> dict:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return auth_headers_for
