"""Address schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class AddressCreate(BaseModel):
    """Create address request"""
    user_id: UUID
    street: str
    number: str
    complement: Optional[str] = None
    neighborhood: str
    city: str = "São Paulo"
    state: str = "SP"
    zip_code: Optional[str] = None
    notes: Optional[str] = None
    is_default: bool = False


class AddressUpdate(BaseModel):
    """Update address request"""
    street: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None
    is_default: Optional[bool] = None


class AddressResponse(BaseModel):
    """Address response"""
    id: UUID
    user_id: UUID
    street: str
    number: str
    complement: Optional[str]
    neighborhood: str
    city: str
    state: str
    zip_code: Optional[str]
    notes: Optional[str]
    is_default: bool
    created_at: datetime

    class Config:
        from_attributes = True
