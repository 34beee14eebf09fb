"""Order models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Integer, Numeric, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.database import Base


class OrderStatus(str, enum.Enum):
    """Persisted order lifecycle states"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderType(str, enum.Enum):
    DELIVERY = "delivery"
    COUNTER = "counter"


class PaymentMethod(str, enum.Enum):
    PIX = "pix"
    CASH = "cash"
    CARD_POS = "card_pos"
    CARD_DEBIT = "card_debit"
    CARD_CREDIT = "card_credit"


class Order(Base):
    """Customer and point-of-sale orders"""
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    address_id = Column(UUID(as_uuid=True), ForeignKey("addresses.id"))
    motoboy_id = Column(UUID(as_uuid=True), ForeignKey("motoboys.id"))

    order_type = Column(String(20), nullable=False, default=OrderType.DELIVERY.value)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)

    # Pricing
    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    original_delivery_fee = Column(Numeric(10, 2))
    delivery_fee_adjusted = Column(Boolean, nullable=False, default=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    delivery_distance = Column(Numeric(10, 2))  # km, null for counter orders

    # Payment
    payment_method = Column(String(20), nullable=False)
    change_for = Column(Numeric(10, 2))

    # Notes
    notes = Column(Text)
    customer_name = Column(String(255))

    # Lifecycle timestamps, each stamped once
    created_at = Column(DateTime, default=datetime.utcnow)
    accepted_at = Column(DateTime)
    preparing_at = Column(DateTime)
    ready_at = Column(DateTime)
    dispatched_at = Column(DateTime)
    delivered_at = Column(DateTime)
    cancelled_at = Column(DateTime)

    # Relationships
    user = relationship("User", back_populates="orders")
    address = relationship("Address")
    motoboy = relationship("Motoboy", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.position")


class OrderItem(Base):
    """Line items, a price snapshot taken when the order is placed"""
    __tablename__ = "order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String(64))
    position = Column(Integer, nullable=False, default=0)

    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")
