"""
FastAPI Application Entry Point.

This is the main application file for the Moto-taxi Dispatch Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from mototaxi.app.core.config import settings
from mototaxi.app.api.router import router as api_router
from mototaxi.app.core.observability import ObservabilityMiddleware, configure_logging
from mototaxi.app.core.redis_client import ping_redis
from mototaxi.app.db.session import engine, Base
from mototaxi.app.services.broadcaster import get_broadcaster
from mototaxi.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from mototaxi.app.models.ride import Ride
from mototaxi.app.models.client import Client
from mototaxi.app.models.driver import Driver
from mototaxi.app.models.audit_log import AuditLog

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Starts the broadcast relay (redis backend) and stops it on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    broadcaster = get_broadcaster()
    await broadcaster.start()
    yield
    await broadcaster.stop()
    await engine.dispose()

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Ride dispatch backend for a moto-taxi service",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information; includes the Redis
        state when the broadcaster runs on Redis
    """
    health = {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "broadcast_backend": settings.broadcast_backend,
    }
    if settings.broadcast_backend == "redis":
        health["redis"] = "up" if await ping_redis() else "down"
    return health


app.include_router(api_router)


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to the Moto-taxi Dispatch API",
        "docs": "/docs",
        "health": "/health",
    }
