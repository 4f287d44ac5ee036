import os

os.environ["TESTING"] = "1"
os.environ.setdefault("DB_USER", "test")
os.environ.setdefault("DB_PASSWORD", "test")
os.environ.setdefault("DB_NAME", "kos_market_test")
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_PORT", "5432")

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from kos_market.api.dependencies import get_async_session, get_user
from kos_market.api.main import app
from kos_market.models import Content, Listing, User
from kos_market.models.enums.user_role import UserRole
from kos_market.services.lifecycle.lifecycle_service import LifecycleService

DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_EMAIL = "admin@example.com"
SELLER_EMAIL = "seller@example.com"
RENTER_EMAIL = "renter@example.com"

ARCHIVED_AT = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)

fake = Faker()

# token metadata returned by the overridden guard
current_identity = {"email": ADMIN_EMAIL}


async def override_get_user():
    return dict(current_identity)


app.dependency_overrides[get_user] = override_get_user


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        # ensure that we are connecting to the same
        # in memory database
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_async_session():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    yield factory
    app.dependency_overrides.pop(get_async_session, None)


@pytest.fixture()
def identity():
    current_identity["email"] = ADMIN_EMAIL
    yield current_identity
    current_identity["email"] = ADMIN_EMAIL


@pytest_asyncio.fixture()
async def users(session_factory) -> dict[str, int]:
    async with session_factory() as session:
        admin = User(
            id=1, name="Admin User", username="admin", email=ADMIN_EMAIL,
            role=UserRole.ADMIN,
        )
        seller = User(
            id=2, name="Seller User", username="seller", email=SELLER_EMAIL,
            role=UserRole.SELLER,
        )
        renter = User(
            id=3, name="Renter User", username="renter", email=RENTER_EMAIL,
            role=UserRole.RENTER,
        )
        session.add_all([admin, seller, renter])
        await session.commit()
    return {"admin": 1, "seller": 2, "renter": 3}


@pytest_asyncio.fixture()
async def make_listing(session_factory, users):
    async def _make(
        listing_id: int | None = None,
        archived_at: datetime | None = None,
        archived_by: int | None = None,
        is_featured: bool = False,
        view_count: int = 0,
    ) -> Listing:
        async with session_factory() as session:
            content = Content(
                user_id=users["seller"],
                title=fake.sentence(nb_words=4),
                description=fake.text(max_nb_chars=200),
                price=fake.random_int(min=500_000, max=3_000_000),
                is_featured=is_featured,
                view_count=view_count,
                deleted_at=archived_at,
                deleted_by=archived_by,
            )
            session.add(content)
            await session.flush()

            listing = Listing(
                id=listing_id,
                content_id=content.id,
                name=f"Kos {fake.last_name()}",
                address=fake.street_address(),
                city=fake.city(),
                facilities="WiFi, AC",
                total_rooms=10,
                occupied_rooms=4,
                deleted_at=archived_at,
                deleted_by=archived_by,
            )
            session.add(listing)
            await session.commit()
            return listing

    return _make


@pytest.fixture()
def read_pair(session_factory):
    """Loads the listing and content rows in a fresh session."""

    async def _read(listing_id: int, content_id: int):
        async with session_factory() as session:
            listing = await session.get(Listing, listing_id)
            content = await session.get(Content, content_id)
            return listing, content

    return _read


@pytest_asyncio.fixture()
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def archived_at() -> datetime:
    return ARCHIVED_AT


@pytest.fixture()
def lifecycle_service(session, users, archived_at) -> LifecycleService:
    return LifecycleService(
        session,
        actor_id=users["admin"],
        clock=lambda: archived_at,
        atomic_pair_writes=True,
    )


@pytest_asyncio.fixture()
async def async_client(session_factory, identity) -> AsyncClient:
    headers = {"Authorization": "Bearer fake"}

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers=headers
    ) as client:
        yield client

