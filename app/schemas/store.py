"""Store settings schemas"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class StoreSettingsUpdate(BaseModel):
    """Update store settings request"""
    store_address: Optional[str] = None
    store_lat: Optional[Decimal] = Field(None, ge=-90, le=90)
    store_lng: Optional[Decimal] = Field(None, ge=-180, le=180)
    delivery_rate_per_km: Optional[Decimal] = Field(None, ge=0)
    min_delivery_fee: Optional[Decimal] = Field(None, ge=0)
    max_delivery_distance: Optional[Decimal] = Field(None, gt=0)
    pix_key: Optional[str] = None
    opening_hours: Optional[dict] = None
    is_open: Optional[bool] = None


class StoreSettingsResponse(BaseModel):
    """Store settings response"""
    store_address: Optional[str]
    store_lat: Optional[Decimal]
    store_lng: Optional[Decimal]
    delivery_rate_per_km: Optional[Decimal]
    min_delivery_fee: Optional[Decimal]
    max_delivery_distance: Optional[Decimal]
    pix_key: Optional[str]
    opening_hours: Optional[dict]
    is_open: bool

    class Config:
        from_attributes = True
