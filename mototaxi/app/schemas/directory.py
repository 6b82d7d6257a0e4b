"""
Directory schemas: client and driver registration and listing.
"""

from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional

from mototaxi.app.models.enums import ApprovalStatus
from mototaxi.app.schemas.ride import CamelModel


class ClientRegister(CamelModel):
    """Schema for client registration (POST /register/client)."""
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=3)
    cpf: str = Field(..., min_length=11, max_length=14)
    phone_number: str = Field(..., min_length=8)
    city: str = Field(..., min_length=1)


class DriverRegister(CamelModel):
    """
    Schema for driver registration (POST /register/driver).

    Documents arrive as URLs; the upload itself happens elsewhere.
    """
    name: str = Field(..., min_length=1)
    age: Optional[int] = Field(None, ge=18)
    marital_status: Optional[str] = None
    cpf: str = Field(..., min_length=11, max_length=14)
    phone_number: str = Field(..., min_length=8)
    city: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=3)
    profile_photo_url: str
    cnh_photo_url: str
    moto_doc_url: str


class ClientResponse(CamelModel):
    id: str
    name: str
    email: str
    cpf: str
    phone_number: str
    city: str
    created_at: datetime


class DriverResponse(CamelModel):
    id: str
    name: str
    age: Optional[int] = None
    marital_status: Optional[str] = None
    cpf: str
    email: str
    phone_number: str
    city: str
    profile_photo_url: Optional[str] = None
    cnh_photo_url: Optional[str] = None
    moto_doc_url: Optional[str] = None
    approval_status: ApprovalStatus
    created_at: datetime


class ClientRegisterResponse(CamelModel):
    message: str
    user: ClientResponse


class DriverRegisterResponse(CamelModel):
    message: str
    user: DriverResponse
