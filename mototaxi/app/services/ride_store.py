"""
Ride Store.

The single source of truth for ride state. Every operation is one
statement followed by its commit; mutations that depend on the current
status are expressed as a conditional UPDATE so the database decides
atomically whether the precondition still holds.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mototaxi.app.core.exceptions import StoreError
from mototaxi.app.models.ride import Ride
from mototaxi.app.models.ride_enums import RideStatus

logger = logging.getLogger(__name__)


class RideStore:
    """SQLAlchemy-backed access to the ``rides`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fail(self, operation: str, exc: SQLAlchemyError):
        logger.error("Ride store %s failed: %s", operation, exc)
        await self.db.rollback()
        raise StoreError(details={"operation": operation}) from exc

    async def insert(self, ride: Ride) -> Ride:
        """Persist a new ride and return it with server-side defaults loaded."""
        try:
            self.db.add(ride)
            await self.db.commit()
            await self.db.refresh(ride)
        except SQLAlchemyError as exc:
            await self._fail("insert", exc)
        return ride

    async def conditional_update(self, ride_id: str, expected_status: RideStatus, **values) -> int:
        """
        Apply ``values`` to the ride only if it is still in ``expected_status``.

        Args:
            ride_id: Ride to update
            expected_status: Status the ride must have when the statement runs
            **values: Column values to set

        Returns:
            Number of rows the statement matched (0 or 1)
        """
        stmt = (
            update(Ride)
            .where(Ride.id == ride_id, Ride.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self._fail("conditional_update", exc)
        return result.rowcount

    async def select_by_id(self, ride_id: str) -> Optional[Ride]:
        """Fetch a ride, bypassing any stale copy in the session identity map."""
        stmt = select(Ride).where(Ride.id == ride_id).execution_options(populate_existing=True)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            await self._fail("select_by_id", exc)
        return result.scalar_one_or_none()

    async def select_where(self, status: RideStatus) -> List[Ride]:
        """Rides in ``status``, most recently created first."""
        stmt = (
            select(Ride)
            .where(Ride.status == status)
            .order_by(Ride.created_at.desc(), Ride.seq.desc())
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            await self._fail("select_where", exc)
        return list(result.scalars().all())

    async def delete_where(self, status: RideStatus) -> int:
        """Delete every ride in ``status``; returns the number removed."""
        stmt = delete(Ride).where(Ride.status == status).execution_options(synchronize_session=False)
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self._fail("delete_where", exc)
        return result.rowcount
