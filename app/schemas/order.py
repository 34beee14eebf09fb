"""Order schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.order import OrderStatus, OrderType, PaymentMethod


class OrderItemCreate(BaseModel):
    """Create order item"""
    product_id: Optional[str] = None
    product_name: str
    quantity: int = Field(1, ge=1)
    unit_price: Decimal = Field(..., ge=0)


class OrderCreate(BaseModel):
    """Create order request (checkout or point of sale)"""
    user_id: Optional[UUID] = None
    address_id: Optional[UUID] = None
    order_type: OrderType = OrderType.DELIVERY
    # Point-of-sale orders are created already accepted
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderItemCreate] = Field(..., min_length=1)
    delivery_fee: Optional[Decimal] = Field(None, ge=0)
    delivery_distance: Optional[Decimal] = Field(None, ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    payment_method: PaymentMethod
    change_for: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = None
    customer_name: Optional[str] = None

    @model_validator(mode="after")
    def check_order_shape(self):
        if self.status not in (OrderStatus.PENDING, OrderStatus.ACCEPTED):
            raise ValueError("orders are created as pending or accepted")
        if self.change_for is not None and self.payment_method != PaymentMethod.CASH:
            raise ValueError("change_for is only allowed for cash payments")
        if self.order_type == OrderType.DELIVERY and self.address_id is None:
            raise ValueError("delivery orders need an address_id")
        if self.order_type == OrderType.COUNTER and self.delivery_distance is not None:
            raise ValueError("counter orders have no delivery distance")
        return self


class OrderStatusUpdate(BaseModel):
    """Drive a status transition"""
    status: str


class OrderAssign(BaseModel):
    """Assign a courier to a ready order. Accepts ``motoboyId`` from the storefront client."""
    model_config = ConfigDict(populate_by_name=True)

    motoboy_id: UUID = Field(..., alias="motoboyId")


class DeliveryFeeUpdate(BaseModel):
    """Manual delivery fee correction"""
    delivery_fee: Decimal = Field(..., ge=0)


class OrderItemResponse(BaseModel):
    """Order item in response"""
    id: UUID
    product_id: Optional[str]
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response"""
    id: UUID
    user_id: Optional[UUID]
    address_id: Optional[UUID]
    motoboy_id: Optional[UUID]
    order_type: str
    status: str
    subtotal: Decimal
    delivery_fee: Decimal
    original_delivery_fee: Optional[Decimal]
    delivery_fee_adjusted: bool
    discount: Decimal
    total: Decimal
    delivery_distance: Optional[Decimal]
    payment_method: str
    change_for: Optional[Decimal]
    notes: Optional[str]
    customer_name: Optional[str]
    created_at: datetime
    accepted_at: Optional[datetime]
    preparing_at: Optional[datetime]
    ready_at: Optional[datetime]
    dispatched_at: Optional[datetime]
    delivered_at: Optional[datetime]
    cancelled_at: Optional[datetime]

    class Config:
        from_attributes = True
