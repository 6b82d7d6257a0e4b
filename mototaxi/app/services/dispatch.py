"""
Dispatch Coordinator.

Owns every status transition of a ride. The accept path is a single
conditional UPDATE against the ride store: whichever request's statement
finds the ride still PENDING wins, every other one matches zero rows and
gets a ConflictError. There is no read-then-write and no application
lock on this path.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from mototaxi.app.core.config import settings
from mototaxi.app.core.exceptions import ValidationError, ConflictError, NotFoundError
from mototaxi.app.models.ride import Ride
from mototaxi.app.models.ride_enums import RideStatus, RideEvent
from mototaxi.app.schemas.ride import RideResponse, RideStatusView
from mototaxi.app.services.broadcaster import Broadcaster
from mototaxi.app.services.directory import Directory
from mototaxi.app.services.ride_store import RideStore

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def ride_payload(ride: Ride) -> dict:
    """Full ride record as sent on the real-time channel."""
    return RideResponse.model_validate(ride).model_dump(mode="json", by_alias=True)


class DispatchCoordinator:
    """Ride state machine: PENDING -> ACCEPTED."""

    def __init__(self, store: RideStore, broadcaster: Broadcaster, directory: Directory):
        self.store = store
        self.broadcaster = broadcaster
        self.directory = directory

    async def _announce(self, event: str, ride: Ride):
        # The transition is already committed; a broadcast failure must not undo it
        try:
            await self.broadcaster.publish(event, ride_payload(ride))
        except Exception:
            logger.exception("Broadcast of %s for ride %s failed", event, ride.id)

    async def create_ride(
        self,
        client_id: str,
        origin: str,
        destination: str,
        payment_method: Optional[str] = None,
        request_type: Optional[str] = None,
        client_name: Optional[str] = None,
        client_phone_number: Optional[str] = None,
    ) -> Ride:
        """
        Create a PENDING ride and announce it.

        Raises:
            ValidationError: client_id, origin or destination missing/blank
            StoreError: the insert failed
        """
        missing = [
            name for name, value in (
                ("clientId", client_id),
                ("origin", origin),
                ("destination", destination),
            )
            if _is_blank(value)
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing=missing)

        ride = Ride(
            client_id=client_id.strip(),
            client_name=client_name,
            client_phone_number=client_phone_number,
            driver_id=None,
            origin=origin.strip(),
            destination=destination.strip(),
            payment_method=payment_method if not _is_blank(payment_method) else settings.default_payment_method,
            request_type=request_type if not _is_blank(request_type) else settings.default_request_type,
            value=settings.ride_base_fare,
            status=RideStatus.PENDING,
        )
        ride = await self.store.insert(ride)
        logger.info("Ride %s requested by %s (%s)", ride.id, ride.client_id, ride.request_type)

        await self._announce(RideEvent.CREATED, ride)
        return ride

    async def list_available_rides(self) -> List[Ride]:
        """PENDING rides, newest first, as of the moment of the read."""
        return await self.store.select_where(RideStatus.PENDING)

    async def accept_ride(self, ride_id: str, driver_id: str) -> Ride:
        """
        Assign the ride to driver_id if nobody has taken it yet.

        Raises:
            ValidationError: driver_id missing
            ConflictError: ride absent, already accepted or past PENDING
            StoreError: the update failed
        """
        if _is_blank(driver_id):
            raise ValidationError("driverId is required", missing=["driverId"])

        matched = await self.store.conditional_update(
            ride_id,
            RideStatus.PENDING,
            status=RideStatus.ACCEPTED,
            driver_id=driver_id,
            accepted_at=datetime.now(timezone.utc),
        )
        if matched != 1:
            logger.info("Driver %s lost ride %s (no longer available)", driver_id, ride_id)
            raise ConflictError(details={"ride_id": ride_id})

        ride = await self.store.select_by_id(ride_id)
        logger.info("Ride %s accepted by driver %s", ride_id, driver_id)

        await self._announce(RideEvent.STATUS_CHANGED, ride)
        return ride

    async def get_ride_status(self, ride_id: str) -> RideStatusView:
        """
        Ride merged with the assigned driver's display fields.

        Raises:
            NotFoundError: unknown ride_id
        """
        ride = await self.store.select_by_id(ride_id)
        if ride is None:
            raise NotFoundError("Ride", ride_id)

        view = RideStatusView.model_validate(ride)
        if ride.driver_id:
            driver = await self.directory.get_driver(ride.driver_id)
            if driver is not None:
                view.driver_name = driver.name
                view.driver_phone_number = driver.phone_number
                view.driver_photo_url = driver.profile_photo_url
        return view

    async def clear_pending_rides(self) -> int:
        """Remove every PENDING ride (operator bulk stop). Accepted rides stay."""
        removed = await self.store.delete_where(RideStatus.PENDING)
        logger.info("Removed %d pending rides", removed)
        return removed
