"""
API Router.

Aggregates all endpoints. Paths are unversioned because the mobile
apps already call them as-is.
"""

from fastapi import APIRouter
from mototaxi.app.api.endpoints import admin, auth, realtime, registration, rides

router = APIRouter()

# Authentication and registration
router.include_router(auth.router)
router.include_router(registration.router)

# Ride lifecycle
router.include_router(rides.client_router)
router.include_router(rides.driver_router)
router.include_router(rides.ride_router)

# Real-time channel
router.include_router(realtime.router)

# Operator
router.include_router(admin.router)
