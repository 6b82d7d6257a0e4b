"""
Registration API Endpoints.

Clients are usable immediately; drivers wait for admin approval.
"""

from fastapi import APIRouter, Depends, status

from mototaxi.app.core.dependencies import get_directory
from mototaxi.app.schemas.directory import (
    ClientRegister, ClientRegisterResponse, ClientResponse,
    DriverRegister, DriverRegisterResponse, DriverResponse
)
from mototaxi.app.services.directory import Directory

router = APIRouter(prefix="/register", tags=["Registration"])


@router.post("/client", response_model=ClientRegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_client(
    data: ClientRegister,
    directory: Directory = Depends(get_directory)
):
    """Register a client. 409 if the CPF or email is taken."""
    client = await directory.register_client(data)
    return ClientRegisterResponse(
        message="Registration successful!",
        user=ClientResponse.model_validate(client)
    )


@router.post("/driver", response_model=DriverRegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_driver(
    data: DriverRegister,
    directory: Directory = Depends(get_directory)
):
    """
    Register a driver.

    The driver starts in `pending` approval status and cannot accept
    rides until an admin approves them.
    """
    driver = await directory.register_driver(data)
    return DriverRegisterResponse(
        message="Driver registration received! Await approval.",
        user=DriverResponse.model_validate(driver)
    )
