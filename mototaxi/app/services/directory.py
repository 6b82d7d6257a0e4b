"""
Client and driver directory.

Looks up credentials and approval status for the dispatch and auth
layers, and handles registration and the driver approval toggle.
"""

import logging
from typing import List, Optional, Tuple, Union

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mototaxi.app.core.exceptions import ConflictError, ResourceNotFoundError
from mototaxi.app.core.security import get_password_hash
from mototaxi.app.models.client import Client
from mototaxi.app.models.driver import Driver
from mototaxi.app.models.enums import AccountType, ApprovalStatus
from mototaxi.app.schemas.directory import ClientRegister, DriverRegister

logger = logging.getLogger(__name__)

Account = Union[Client, Driver]


class Directory:
    """Data access for the ``clients`` and ``drivers`` tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_client(self, client_id: str) -> Optional[Client]:
        result = await self.db.execute(select(Client).where(Client.id == client_id))
        return result.scalar_one_or_none()

    async def get_driver(self, driver_id: str) -> Optional[Driver]:
        result = await self.db.execute(select(Driver).where(Driver.id == driver_id))
        return result.scalar_one_or_none()

    async def find_by_identifier(self, login: str) -> Optional[Tuple[AccountType, Account]]:
        """
        Resolve a login (email or CPF) to a driver or a client.

        Drivers are checked first, matching the unified login order.

        Returns:
            (account type, account) or None when nothing matches
        """
        result = await self.db.execute(
            select(Driver).where(or_(Driver.email == login, Driver.cpf == login))
        )
        driver = result.scalar_one_or_none()
        if driver is not None:
            return AccountType.DRIVER, driver

        result = await self.db.execute(
            select(Client).where(or_(Client.email == login, Client.cpf == login))
        )
        client = result.scalar_one_or_none()
        if client is not None:
            return AccountType.CLIENT, client

        return None

    async def _ensure_unique(self, model, cpf: str, email: str):
        result = await self.db.execute(
            select(model).where(or_(model.cpf == cpf, model.email == email))
        )
        existing = result.scalars().first()
        if existing is None:
            return
        if existing.cpf == cpf:
            raise ConflictError("This CPF is already registered", details={"field": "cpf"})
        raise ConflictError("This email is already in use", details={"field": "email"})

    async def _commit_new(self, account: Account) -> Account:
        self.db.add(account)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same cpf/email
            await self.db.rollback()
            raise ConflictError("Account already registered") from exc
        await self.db.refresh(account)
        return account

    async def register_client(self, data: ClientRegister) -> Client:
        await self._ensure_unique(Client, data.cpf, data.email)
        client = Client(
            name=data.name,
            email=data.email,
            cpf=data.cpf,
            phone_number=data.phone_number,
            city=data.city,
            hashed_password=get_password_hash(data.password),
        )
        client = await self._commit_new(client)
        logger.info("Client registered: %s", client.id)
        return client

    async def register_driver(self, data: DriverRegister) -> Driver:
        """Register a driver in PENDING approval status."""
        await self._ensure_unique(Driver, data.cpf, data.email)
        driver = Driver(
            name=data.name,
            age=data.age,
            marital_status=data.marital_status,
            cpf=data.cpf,
            email=data.email,
            phone_number=data.phone_number,
            city=data.city,
            hashed_password=get_password_hash(data.password),
            profile_photo_url=data.profile_photo_url,
            cnh_photo_url=data.cnh_photo_url,
            moto_doc_url=data.moto_doc_url,
            approval_status=ApprovalStatus.PENDING,
        )
        driver = await self._commit_new(driver)
        logger.info("Driver registered, awaiting approval: %s", driver.id)
        return driver

    async def list_drivers(self) -> List[Driver]:
        result = await self.db.execute(select(Driver).order_by(Driver.created_at.desc()))
        return list(result.scalars().all())

    async def set_approval_status(self, driver_id: str, approval_status: ApprovalStatus) -> Driver:
        """
        Approve or reject a driver.

        Raises:
            ResourceNotFoundError: unknown driver_id
        """
        driver = await self.get_driver(driver_id)
        if driver is None:
            raise ResourceNotFoundError("Driver", driver_id)

        driver.approval_status = approval_status
        await self.db.commit()
        await self.db.refresh(driver)
        logger.info("Driver %s is now %s", driver.id, approval_status.value)
        return driver
