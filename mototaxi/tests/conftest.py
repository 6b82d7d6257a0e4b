"""
Centralized Test Configuration.
"""

import itertools

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from mototaxi.app.main import app
from mototaxi.app.core.config import settings
from mototaxi.app.core.security import get_password_hash
from mototaxi.app.db.session import get_db, Base
from mototaxi.app.models.client import Client
from mototaxi.app.models.driver import Driver
from mototaxi.app.models.enums import ApprovalStatus
from mototaxi.app.services.broadcaster import Broadcaster, get_broadcaster
from mototaxi.app.services.directory import Directory
from mototaxi.app.services.dispatch import DispatchCoordinator
from mototaxi.app.services.ride_store import RideStore

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

_cpf_numbers = itertools.count(10000000000)


class RecordingBroadcaster(Broadcaster):
    """Broadcaster that also remembers every published event."""

    def __init__(self):
        super().__init__()
        self.events = []

    async def publish(self, event, payload):
        self.events.append((event, payload))
        await super().publish(event, payload)

    def named(self, event):
        return [payload for name, payload in self.events if name == event]


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture(autouse=True)
def apply_overrides(broadcaster):
    """Route the app to the test database and the recording broadcaster."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    yield

    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def coordinator(db_session, broadcaster):
    """Coordinator over the test session, bypassing HTTP."""
    return DispatchCoordinator(
        store=RideStore(db_session),
        broadcaster=broadcaster,
        directory=Directory(db_session),
    )


@pytest.fixture
def seed_driver(db_session):
    """Factory inserting a driver with a fixed id (approved by default)."""

    async def _seed(driver_id, approval_status=ApprovalStatus.APPROVED, name=None, password="secret"):
        driver = Driver(
            id=driver_id,
            name=name or f"Driver {driver_id}",
            cpf=str(next(_cpf_numbers)),
            email=f"{driver_id}@mototaxi.com",
            phone_number="66999990000",
            city="Colider-MT",
            hashed_password=get_password_hash(password),
            profile_photo_url=f"https://cdn.mototaxi.com/{driver_id}.jpg",
            approval_status=approval_status,
        )
        db_session.add(driver)
        await db_session.commit()
        return driver

    return _seed


@pytest.fixture
def seed_client(db_session):
    """Factory inserting a client with a fixed id."""

    async def _seed(client_id, name=None, password="secret"):
        record = Client(
            id=client_id,
            name=name or f"Client {client_id}",
            cpf=str(next(_cpf_numbers)),
            email=f"{client_id}@mototaxi.com",
            phone_number="66988880000",
            city="Colider-MT",
            hashed_password=get_password_hash(password),
        )
        db_session.add(record)
        await db_session.commit()
        return record

    return _seed


@pytest.fixture
async def admin_headers(client):
    """Log in as the configured operator and return auth headers."""
    response = await client.post("/auth/login", json={
        "login": settings.admin_email,
        "password": settings.admin_password
    })
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}
