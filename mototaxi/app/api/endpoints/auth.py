"""
Authentication API endpoints.

One login for the operator, drivers and clients.
"""

import hmac

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from mototaxi.app.core.config import settings
from mototaxi.app.core.dependencies import get_directory
from mototaxi.app.core.exceptions import AuthenticationError
from mototaxi.app.core.jwt import create_access_token
from mototaxi.app.core.security import verify_password
from mototaxi.app.db.session import get_db
from mototaxi.app.models.enums import AccountType
from mototaxi.app.schemas.auth import LoginRequest, LoginResponse
from mototaxi.app.schemas.directory import ClientResponse, DriverResponse
from mototaxi.app.services.audit import log_event, AuditAction
from mototaxi.app.services.directory import Directory

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _matches(given: str, expected: str) -> bool:
    # compare_digest only takes ASCII str, so compare UTF-8 bytes
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def _is_admin(credentials: LoginRequest) -> bool:
    return (
        _matches(credentials.login, settings.admin_email)
        and _matches(credentials.password, settings.admin_password)
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    directory: Directory = Depends(get_directory),
    db: AsyncSession = Depends(get_db)
):
    """
    Login and return a JWT.

    Checks the operator account first, then drivers, then clients.
    `login` is an email, or a CPF for drivers and clients.
    Logs successful and failed attempts.
    """
    ip_address = request.client.host if request.client else None

    if _is_admin(credentials):
        account_type = AccountType.ADMIN
        user_id, subject = settings.admin_id, settings.admin_email
        user = {"id": settings.admin_id, "email": settings.admin_email, "role": "master"}
    else:
        match = await directory.find_by_identifier(credentials.login)
        if match is None or not verify_password(credentials.password, match[1].hashed_password):
            await log_event(
                db=db,
                action=AuditAction.LOGIN_FAILED,
                actor_id=match[1].id if match else None,
                actor_name=credentials.login,
                ip_address=ip_address,
                metadata={"reason": "Unknown login" if match is None else "Invalid password"}
            )
            raise AuthenticationError("Invalid user or password")

        account_type, account = match
        user_id, subject = account.id, account.email
        schema = DriverResponse if account_type == AccountType.DRIVER else ClientResponse
        user = schema.model_validate(account).model_dump(mode="json", by_alias=True)

    access_token = create_access_token(
        data={"sub": subject, "user_id": user_id, "role": account_type.value}
    )

    await log_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        actor_id=user_id,
        actor_name=subject,
        ip_address=ip_address,
        metadata={"type": account_type.value}
    )

    return LoginResponse(type=account_type, user=user, access_token=access_token)
