"""
Admin API Schema Definitions.

Pydantic schemas for admin endpoints.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from mototaxi.app.schemas.ride import CamelModel


class AdminActionResponse(CamelModel):
    """Schema for admin action response."""
    success: bool
    message: str


class ClearPendingResponse(CamelModel):
    """Response after removing every pending ride."""
    message: str
    removed: int


class AuditLogResponse(CamelModel):
    """Schema for an audit log entry."""
    id: int
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    action: str
    target_id: Optional[str] = None
    meta_data: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    timestamp: datetime
