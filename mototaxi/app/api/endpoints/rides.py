"""
Ride Directory API Endpoints.

Clients request rides, drivers list and accept them, and both poll the
ride status. All state changes go through the DispatchCoordinator.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status

from mototaxi.app.core.dependencies import get_directory, get_dispatch_coordinator
from mototaxi.app.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError, ValidationError
from mototaxi.app.models.enums import ApprovalStatus
from mototaxi.app.schemas.ride import (
    AcceptRideRequest, RideCreateRequest, RideCreateResponse, RideResponse, RideStatusView
)
from mototaxi.app.services.directory import Directory
from mototaxi.app.services.dispatch import DispatchCoordinator

client_router = APIRouter(prefix="/client", tags=["Client - Rides"])
driver_router = APIRouter(prefix="/driver", tags=["Driver - Rides"])
ride_router = APIRouter(prefix="/ride", tags=["Ride Status"])


@client_router.post("/request-service", response_model=RideCreateResponse, status_code=status.HTTP_201_CREATED)
async def request_service(
    request: RideCreateRequest,
    coordinator: DispatchCoordinator = Depends(get_dispatch_coordinator),
    directory: Directory = Depends(get_directory)
):
    """
    Request a ride.

    The ride starts PENDING and is announced to every connected driver
    with a `ride-created` event.
    """
    client_name = client_phone_number = None
    if request.client_id and request.client_id.strip():
        client = await directory.get_client(request.client_id.strip())
        if client is None:
            raise ResourceNotFoundError("Client", request.client_id)
        client_name, client_phone_number = client.name, client.phone_number

    ride = await coordinator.create_ride(
        client_id=request.client_id,
        origin=request.origin,
        destination=request.destination,
        payment_method=request.payment_method,
        request_type=request.request_type,
        client_name=client_name,
        client_phone_number=client_phone_number,
    )

    return RideCreateResponse(
        message="Request sent. Waiting for a driver.",
        ride=RideResponse.model_validate(ride)
    )


@driver_router.get("/rides", response_model=List[RideResponse])
async def list_available_rides(
    coordinator: DispatchCoordinator = Depends(get_dispatch_coordinator)
):
    """List PENDING rides, newest first."""
    return await coordinator.list_available_rides()


@driver_router.post("/rides/{ride_id}/accept", response_model=RideResponse)
async def accept_ride(
    ride_id: str = Path(..., description="Ride ID"),
    request: Optional[AcceptRideRequest] = None,
    coordinator: DispatchCoordinator = Depends(get_dispatch_coordinator),
    directory: Directory = Depends(get_directory)
):
    """
    Accept a PENDING ride.

    Validates:
    - driverId is present (400)
    - Driver exists and is approved (403)

    The first driver whose accept reaches the store wins; everyone else,
    and any accept on a ride that does not exist, gets 409.
    """
    driver_id = (request.driver_id or "").strip() if request is not None else ""
    if not driver_id:
        raise ValidationError("driverId is required", missing=["driverId"])

    driver = await directory.get_driver(driver_id)
    if driver is None or driver.approval_status != ApprovalStatus.APPROVED:
        raise InsufficientPermissionsError(
            "Driver is not approved to accept rides",
            details={"driver_id": driver_id}
        )

    return await coordinator.accept_ride(ride_id, driver_id)


@ride_router.get("/{ride_id}/status", response_model=RideStatusView)
async def get_ride_status(
    ride_id: str = Path(..., description="Ride ID"),
    coordinator: DispatchCoordinator = Depends(get_dispatch_coordinator)
):
    """Ride status merged with the assigned driver's name, phone and photo."""
    return await coordinator.get_ride_status(ride_id)
