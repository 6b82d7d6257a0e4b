"""
Client (passenger) database model.
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from mototaxi.app.db.session import Base
from mototaxi.app.models.identifiers import new_identifier


class Client(Base):
    """Passenger account. Login is by email or CPF."""
    __tablename__ = "clients"

    id = Column(String(64), primary_key=True, default=lambda: new_identifier("client"))
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    cpf = Column(String(14), unique=True, index=True, nullable=False)
    phone_number = Column(String(32), nullable=False)
    city = Column(String(120), nullable=False)
    hashed_password = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}', email='{self.email}')>"
