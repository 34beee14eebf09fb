"""Customer delivery address model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Address(Base):
    """Delivery addresses. At most one default per user, kept by clearing the others on write."""
    __tablename__ = "addresses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    street = Column(String(255), nullable=False)
    number = Column(String(20), nullable=False)
    complement = Column(String(255))
    neighborhood = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False, default="São Paulo")
    state = Column(String(50), nullable=False, default="SP")
    zip_code = Column(String(20))
    notes = Column(Text)

    is_default = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="addresses")
