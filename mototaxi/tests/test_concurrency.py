"""
Concurrent acceptance tests.

Runs against a file-backed SQLite database with one connection per
session, so competing accepts really do race inside the database
instead of queueing on a shared in-memory connection.
"""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from mototaxi.app.main import app
from mototaxi.app.core.exceptions import ConflictError
from mototaxi.app.core.security import get_password_hash
from mototaxi.app.db.session import get_db, Base
from mototaxi.app.models.driver import Driver
from mototaxi.app.models.enums import ApprovalStatus
from mototaxi.app.models.ride_enums import RideEvent, RideStatus
from mototaxi.app.services.directory import Directory
from mototaxi.app.services.dispatch import DispatchCoordinator
from mototaxi.app.services.ride_store import RideStore

DRIVER_IDS = [f"d{n}" for n in range(1, 9)]


@pytest.fixture
async def race_sessions(tmp_path):
    """Session factory over a fresh on-disk database."""
    race_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'race.db'}",
        connect_args={"timeout": 30},
        poolclass=NullPool,
    )
    async with race_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(race_engine, class_=AsyncSession, expire_on_commit=False)

    await race_engine.dispose()


def coordinator_for(session, broadcaster):
    return DispatchCoordinator(
        store=RideStore(session), broadcaster=broadcaster, directory=Directory(session)
    )


async def attempt_accept(sessions, broadcaster, ride_id, driver_id):
    async with sessions() as session:
        try:
            await coordinator_for(session, broadcaster).accept_ride(ride_id, driver_id)
        except ConflictError:
            return None
    return driver_id


@pytest.mark.asyncio
async def test_two_drivers_exactly_one_wins(race_sessions, broadcaster):
    async with race_sessions() as session:
        ride = await coordinator_for(session, broadcaster).create_ride(
            client_id="c1", origin="A", destination="B"
        )

    outcomes = await asyncio.gather(
        attempt_accept(race_sessions, broadcaster, ride.id, "d1"),
        attempt_accept(race_sessions, broadcaster, ride.id, "d2"),
    )

    winners = [driver_id for driver_id in outcomes if driver_id is not None]
    assert len(winners) == 1

    async with race_sessions() as session:
        view = await coordinator_for(session, broadcaster).get_ride_status(ride.id)
    assert view.status == RideStatus.ACCEPTED
    assert view.driver_id == winners[0]


@pytest.mark.asyncio
async def test_many_drivers_one_winner_one_event(race_sessions, broadcaster):
    async with race_sessions() as session:
        ride = await coordinator_for(session, broadcaster).create_ride(
            client_id="c1", origin="A", destination="B"
        )

    outcomes = await asyncio.gather(*(
        attempt_accept(race_sessions, broadcaster, ride.id, driver_id)
        for driver_id in DRIVER_IDS
    ))

    winners = [driver_id for driver_id in outcomes if driver_id is not None]
    assert len(winners) == 1

    status_events = broadcaster.named(RideEvent.STATUS_CHANGED)
    assert len(status_events) == 1
    assert status_events[0]["driverId"] == winners[0]


@pytest.mark.asyncio
async def test_racing_accepts_over_http(client, race_sessions, broadcaster):
    """Concurrent POSTs: one 200, every other response 409."""

    async def override_get_db():
        async with race_sessions() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with race_sessions() as session:
        for index, driver_id in enumerate(DRIVER_IDS, start=1):
            session.add(Driver(
                id=driver_id,
                name=f"Driver {driver_id}",
                cpf=f"{index:011d}",
                email=f"{driver_id}@mototaxi.com",
                phone_number="66999990000",
                city="Colider-MT",
                hashed_password=get_password_hash("secret"),
                approval_status=ApprovalStatus.APPROVED,
            ))
        await session.commit()
        ride = await coordinator_for(session, broadcaster).create_ride(
            client_id="c1", origin="A", destination="B"
        )

    responses = await asyncio.gather(*(
        client.post(f"/driver/rides/{ride.id}/accept", json={"driverId": driver_id})
        for driver_id in DRIVER_IDS
    ))

    codes = sorted(response.status_code for response in responses)
    assert codes == [200] + [409] * (len(DRIVER_IDS) - 1)

    winner = next(r.json()["driverId"] for r in responses if r.status_code == 200)
    status_view = (await client.get(f"/ride/{ride.id}/status")).json()
    assert status_view["driverId"] == winner
    assert status_view["status"] == "ACCEPTED"
