"""
Security guards for role-based access control.
"""

from fastapi import Depends, HTTPException, status
from mototaxi.app.models.enums import AccountType
from mototaxi.app.core.dependencies import get_current_user


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """
    Dependency for admin-only endpoints.

    Usage:
        @router.post("/admin/drivers/{driver_id}/approve")
        async def approve(driver_id: str, admin: dict = Depends(require_admin)):
            ...

    Args:
        current_user: Authenticated user from JWT

    Returns:
        User payload if admin, raises 403 otherwise
    """
    if current_user.get("role") != AccountType.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    return current_user
