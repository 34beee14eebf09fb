"""User model for customers and staff"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    CUSTOMER = "customer"
    ADMIN = "admin"
    KITCHEN = "kitchen"
    MOTOBOY = "motoboy"
    PDV = "pdv"


STAFF_ROLES = (UserRole.ADMIN, UserRole.KITCHEN, UserRole.MOTOBOY, UserRole.PDV)


class User(Base):
    """Customers (WhatsApp login) and staff (password login)"""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Profile
    name = Column(String(255), nullable=False)
    whatsapp = Column(String(20), index=True)

    # Authentication (customers logging in by WhatsApp have no password)
    hashed_password = Column(String(255))

    # Role
    role = Column(Enum(UserRole), default=UserRole.CUSTOMER, nullable=False)

    # Status
    is_blocked = Column(Boolean, default=False)

    # Timestamps
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    addresses = relationship("Address", back_populates="user")
    orders = relationship("Order", back_populates="user")

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
