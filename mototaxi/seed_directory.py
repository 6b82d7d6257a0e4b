"""
Database seeding script for a development directory.

Creates an approved demo driver and a demo client so rides can be
requested and accepted right after setup.
Run this script after the database is reachable.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from mototaxi.app.core.observability import configure_logging
from mototaxi.app.core.security import get_password_hash
from mototaxi.app.db.session import AsyncSessionLocal, engine, Base
from mototaxi.app.models.client import Client
from mototaxi.app.models.driver import Driver
from mototaxi.app.models.enums import ApprovalStatus

logger = logging.getLogger("mototaxi.seed")

DEMO_DRIVER_EMAIL = "joao@driver.com"
DEMO_CLIENT_EMAIL = "maria@client.com"


async def seed_directory():
    """
    Seed the demo accounts.

    Creates:
    - 1 approved driver (password "123")
    - 1 client (password "123")
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Driver).where(Driver.email == DEMO_DRIVER_EMAIL))
        if result.scalar_one_or_none():
            logger.info("Demo accounts already exist, skipping seeding")
            return

        driver = Driver(
            name="João da Silva (Test)",
            cpf="12345678900",
            city="Colider-MT",
            email=DEMO_DRIVER_EMAIL,
            phone_number="66999998888",
            hashed_password=get_password_hash("123"),
            profile_photo_url="https://example.com/uploads/profile-demo.jpg",
            approval_status=ApprovalStatus.APPROVED,
        )
        client = Client(
            name="Maria Souza (Test)",
            cpf="98765432100",
            city="Colider-MT",
            email=DEMO_CLIENT_EMAIL,
            phone_number="66988887777",
            hashed_password=get_password_hash("123"),
        )
        db.add_all([driver, client])
        await db.commit()

        logger.info("Seeded driver %s (%s)", driver.id, driver.email)
        logger.info("Seeded client %s (%s)", client.id, client.email)


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed_directory())
