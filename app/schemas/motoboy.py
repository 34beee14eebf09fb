"""Motoboy schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class MotoboyCreate(BaseModel):
    """Create motoboy request. ``user_id`` is looked up by phone when omitted."""
    name: str
    whatsapp: str
    photo_url: Optional[str] = None
    is_active: bool = True
    user_id: Optional[UUID] = None


class MotoboyUpdate(BaseModel):
    """Update motoboy request"""
    name: Optional[str] = None
    whatsapp: Optional[str] = None
    photo_url: Optional[str] = None
    is_active: Optional[bool] = None
    user_id: Optional[UUID] = None


class MotoboyResponse(BaseModel):
    """Motoboy response"""
    id: UUID
    user_id: Optional[UUID]
    name: str
    whatsapp: str
    photo_url: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
