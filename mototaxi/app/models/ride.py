"""
Ride database model.

A ride is a client's transportation request. It is created PENDING and
moves to ACCEPTED once exactly one driver wins it.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from mototaxi.app.db.session import Base
from mototaxi.app.models.identifiers import new_identifier
from mototaxi.app.models.ride_enums import RideStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Ride(Base):
    """
    Ride model.

    Invariant: driver_id is set if and only if status is not PENDING.
    Only the dispatch coordinator's conditional update moves a ride out
    of PENDING.
    """
    __tablename__ = "rides"

    # Insertion order; breaks created_at ties when listing
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, index=True, nullable=False, default=lambda: new_identifier("ride"))

    # Requester (opaque reference, "admin" for operator rides)
    client_id = Column(String(64), nullable=False, index=True)
    client_name = Column(String(255), nullable=True)
    client_phone_number = Column(String(32), nullable=True)

    # Assigned on acceptance only
    driver_id = Column(String(64), nullable=True, index=True)

    # Trip details
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    payment_method = Column(String(50), nullable=False)
    request_type = Column(String(50), nullable=False)
    value = Column(Float, nullable=False)

    # Status
    status = Column(Enum(RideStatus), default=RideStatus.PENDING, nullable=False, index=True)

    # Timestamps (set in Python for sub-second ordering on every backend)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    accepted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Ride(id={self.id}, client_id={self.client_id}, status='{self.status.value}')>"
