"""
Ride schemas.

Wire format is camelCase (the mobile apps speak JSON the JavaScript way);
attributes stay snake_case in Python.
"""

from pydantic import BaseModel, Field, AliasChoices
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from mototaxi.app.models.ride_enums import RideStatus


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class RideCreateRequest(CamelModel):
    """
    Schema for a client's service request.

    Fields are optional at the schema level so that missing values are
    reported by the dispatch layer as a 400 listing every missing field.
    """
    client_id: Optional[str] = None
    origin: Optional[str] = Field(None, validation_alias=AliasChoices("origin", "startLocation"))
    destination: Optional[str] = Field(None, validation_alias=AliasChoices("destination", "endLocation"))
    payment_method: Optional[str] = None
    request_type: Optional[str] = None


class AdminRideCreateRequest(CamelModel):
    """Schema for a ride created by the operator."""
    origin: Optional[str] = Field(None, validation_alias=AliasChoices("origin", "startLocation"))
    destination: Optional[str] = Field(None, validation_alias=AliasChoices("destination", "endLocation"))
    payment_method: Optional[str] = None
    request_type: Optional[str] = None


class AcceptRideRequest(CamelModel):
    """Schema for a driver accepting a ride."""
    driver_id: Optional[str] = None


class RideResponse(CamelModel):
    """Full ride record, also used as the broadcast payload."""
    id: str
    client_id: str
    client_name: Optional[str] = None
    client_phone_number: Optional[str] = None
    driver_id: Optional[str] = None
    origin: str
    destination: str
    payment_method: str
    request_type: str
    value: float
    status: RideStatus
    created_at: datetime
    accepted_at: Optional[datetime] = None


class RideCreateResponse(CamelModel):
    """Response after a ride request."""
    message: str
    ride: RideResponse


class RideStatusView(RideResponse):
    """Ride merged with the assigned driver's display fields."""
    driver_name: Optional[str] = None
    driver_phone_number: Optional[str] = None
    driver_photo_url: Optional[str] = None


