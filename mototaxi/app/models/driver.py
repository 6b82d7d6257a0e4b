"""
Driver database model.

Drivers register with document URLs and wait for admin approval.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from mototaxi.app.db.session import Base
from mototaxi.app.models.enums import ApprovalStatus
from mototaxi.app.models.identifiers import new_identifier


class Driver(Base):
    """
    Driver model.

    approval_status gates ride acceptance: only APPROVED drivers may
    have an accept honored.
    """
    __tablename__ = "drivers"

    id = Column(String(64), primary_key=True, default=lambda: new_identifier("driver"))
    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
    marital_status = Column(String(50), nullable=True)
    cpf = Column(String(14), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone_number = Column(String(32), nullable=False)
    city = Column(String(120), nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Document links (uploads are stored elsewhere)
    profile_photo_url = Column(String(512), nullable=True)
    cnh_photo_url = Column(String(512), nullable=True)
    moto_doc_url = Column(String(512), nullable=True)

    approval_status = Column(Enum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.name}', approval_status='{self.approval_status.value}')>"
