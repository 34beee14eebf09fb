"""Courier (motoboy) model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Motoboy(Base):
    """Delivery couriers.

    ``user_id`` links the courier to the ``motoboy`` user that logs in on the
    courier screen. ``whatsapp`` stays indexed as a secondary lookup for that
    login flow and for linking records created before the user existed.
    """
    __tablename__ = "motoboys"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), unique=True)

    name = Column(String(255), nullable=False)
    whatsapp = Column(String(20), nullable=False, index=True)
    photo_url = Column(String(500))
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User")
    orders = relationship("Order", back_populates="motoboy")
