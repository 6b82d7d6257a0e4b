"""
Ride-related enumerations.
"""

import enum


class RideStatus(str, enum.Enum):
    """Ride status enumeration."""
    PENDING = "PENDING"  # Requested by a client, waiting for a driver
    ACCEPTED = "ACCEPTED"  # A driver won the ride
    COMPLETED = "COMPLETED"  # Not reachable yet
    CANCELLED = "CANCELLED"  # Not reachable yet


# Names used on the real-time channel
class RideEvent:
    CREATED = "ride-created"
    STATUS_CHANGED = "ride-status-changed"
