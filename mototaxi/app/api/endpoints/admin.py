"""
Admin API Endpoints.

Driver approval, operator-created rides and bulk removal of pending
rides. Every action is written to the audit log.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mototaxi.app.core.dependencies import get_directory, get_dispatch_coordinator
from mototaxi.app.core.exceptions import ValidationError
from mototaxi.app.core.guards import require_admin
from mototaxi.app.db.session import get_db
from mototaxi.app.models.enums import ApprovalStatus
from mototaxi.app.schemas.admin import AdminActionResponse, AuditLogResponse, ClearPendingResponse
from mototaxi.app.schemas.directory import DriverResponse
from mototaxi.app.schemas.ride import AdminRideCreateRequest, RideCreateResponse, RideResponse
from mototaxi.app.services.audit import AuditAction, get_audit_trail, log_admin_action
from mototaxi.app.services.directory import Directory
from mototaxi.app.services.dispatch import DispatchCoordinator

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/drivers", response_model=List[DriverResponse])
async def list_drivers(
    admin: dict = Depends(require_admin),
    directory: Directory = Depends(get_directory)
):
    """List every registered driver, newest first, with approval status."""
    return await directory.list_drivers()


async def _set_approval(
    driver_id: str,
    approval_status: ApprovalStatus,
    action: str,
    admin: dict,
    directory: Directory,
    db: AsyncSession
) -> AdminActionResponse:
    driver = await directory.set_approval_status(driver_id, approval_status)
    await log_admin_action(db, admin, action, target_id=driver.id, metadata={"driver_name": driver.name})
    return AdminActionResponse(success=True, message=f"Driver {driver.name} is now {approval_status.value}.")


@router.post("/drivers/{driver_id}/approve", response_model=AdminActionResponse)
async def approve_driver(
    driver_id: str = Path(..., description="Driver ID"),
    admin: dict = Depends(require_admin),
    directory: Directory = Depends(get_directory),
    db: AsyncSession = Depends(get_db)
):
    """Approve a driver; approved drivers may accept rides."""
    return await _set_approval(driver_id, ApprovalStatus.APPROVED, AuditAction.DRIVER_APPROVED, admin, directory, db)


@router.post("/drivers/{driver_id}/reprove", response_model=AdminActionResponse)
async def reprove_driver(
    driver_id: str = Path(..., description="Driver ID"),
    admin: dict = Depends(require_admin),
    directory: Directory = Depends(get_directory),
    db: AsyncSession = Depends(get_db)
):
    """Reject a driver."""
    return await _set_approval(driver_id, ApprovalStatus.REJECTED, AuditAction.DRIVER_REJECTED, admin, directory, db)


@router.post("/create-ride", response_model=RideCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_operator_ride(
    request: AdminRideCreateRequest,
    admin: dict = Depends(require_admin),
    coordinator: DispatchCoordinator = Depends(get_dispatch_coordinator),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a ride on behalf of the operator.

    Unlike client requests, the payment method is mandatory here.
    """
    missing = [
        name for name, value in (
            ("origin", request.origin),
            ("destination", request.destination),
            ("paymentMethod", request.payment_method),
        )
        if not value or not value.strip()
    ]
    if missing:
        raise ValidationError(f"Incomplete ride data: {', '.join(missing)}", missing=missing)

    ride = await coordinator.create_ride(
        client_id="admin",
        origin=request.origin,
        destination=request.destination,
        payment_method=request.payment_method,
        request_type=request.request_type,
        client_name="Admin",
        client_phone_number="N/A",
    )
    await log_admin_action(db, admin, AuditAction.ADMIN_RIDE_CREATED, target_id=ride.id)

    return RideCreateResponse(message="Ride created successfully.", ride=RideResponse.model_validate(ride))


@router.post("/rides/stop-all", response_model=ClearPendingResponse)
async def stop_all_pending_rides(
    admin: dict = Depends(require_admin),
    coordinator: DispatchCoordinator = Depends(get_dispatch_coordinator),
    db: AsyncSession = Depends(get_db)
):
    """Remove every PENDING ride. Accepted rides are kept."""
    removed = await coordinator.clear_pending_rides()
    await log_admin_action(db, admin, AuditAction.PENDING_RIDES_CLEARED, metadata={"removed": removed})
    return ClearPendingResponse(message=f"{removed} pending rides were removed.", removed=removed)


@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def list_audit_logs(
    action: str = Query(None, description="Filter by action"),
    limit: int = Query(100, ge=1, le=500),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Audit trail, most recent first."""
    return await get_audit_trail(db, action=action, limit=limit)
