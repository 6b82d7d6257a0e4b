"""
FastAPI dependencies.

Wires the per-request database session into the ride store, directory
and dispatch coordinator, and provides JWT authentication.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from mototaxi.app.core.jwt import decode_access_token
from mototaxi.app.db.session import get_db
from mototaxi.app.services.broadcaster import Broadcaster, get_broadcaster
from mototaxi.app.services.directory import Directory
from mototaxi.app.services.dispatch import DispatchCoordinator
from mototaxi.app.services.ride_store import RideStore

# HTTP Bearer security scheme
security = HTTPBearer()


def get_ride_store(db: AsyncSession = Depends(get_db)) -> RideStore:
    return RideStore(db)


def get_directory(db: AsyncSession = Depends(get_db)) -> Directory:
    return Directory(db)


def get_dispatch_coordinator(
    store: RideStore = Depends(get_ride_store),
    directory: Directory = Depends(get_directory),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> DispatchCoordinator:
    """Coordinator bound to this request's session and the shared broadcaster."""
    return DispatchCoordinator(store=store, broadcaster=broadcaster, directory=directory)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Args:
        credentials: HTTP Bearer token from request header

    Returns:
        Decoded token payload (sub, user_id, role)

    Raises:
        HTTPException: 401 if the token is invalid or incomplete
    """
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not payload.get("user_id") or not payload.get("role"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload
