"""Store settings model"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, JSON, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from datetime import datetime

from app.database import Base


class StoreSettings(Base):
    """Single-row store configuration edited from the admin dashboard"""
    __tablename__ = "store_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Location used as the delivery origin
    store_address = Column(Text)
    store_lat = Column(Numeric(9, 6))
    store_lng = Column(Numeric(9, 6))

    # Distance pricing
    delivery_rate_per_km = Column(Numeric(10, 2))
    min_delivery_fee = Column(Numeric(10, 2))
    max_delivery_distance = Column(Numeric(10, 2))

    # Displayed at checkout, never verified
    pix_key = Column(String(255))

    # {"monday": {"open": "18:00", "close": "02:00"}, ...}
    opening_hours = Column(JSON)
    is_open = Column(Boolean, default=True)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
