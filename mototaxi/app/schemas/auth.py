"""
Authentication Pydantic schemas.

Defines request and response schemas for the unified login endpoint.
"""

from pydantic import Field
from typing import Any, Dict

from mototaxi.app.models.enums import AccountType
from mototaxi.app.schemas.ride import CamelModel


class LoginRequest(CamelModel):
    """
    Schema for login.

    Used by POST /auth/login. ``login`` is an email, or a CPF for
    drivers and clients.
    """
    login: str = Field(..., description="Email or CPF")
    password: str = Field(..., description="Password")


class LoginResponse(CamelModel):
    """Returned by a successful login."""
    type: AccountType
    user: Dict[str, Any]
    access_token: str
    token_type: str = "bearer"
