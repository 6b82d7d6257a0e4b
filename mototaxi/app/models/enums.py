"""
Account enumerations.

Defines the account types and the driver approval workflow states.
"""

import enum


class AccountType(str, enum.Enum):
    """
    Account type enumeration.

    Types:
        ADMIN: Operator account configured from the environment
        DRIVER: Registered moto-taxi driver
        CLIENT: Passenger requesting rides
    """
    ADMIN = "admin"
    DRIVER = "driver"
    CLIENT = "client"


class ApprovalStatus(str, enum.Enum):
    """Driver approval status. Only APPROVED drivers may accept rides."""
    PENDING = "pending"  # Registered, awaiting admin review
    APPROVED = "approved"
    REJECTED = "rejected"
