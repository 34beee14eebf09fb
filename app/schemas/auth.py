"""Authentication schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel

from app.models.user import UserRole


class Token(BaseModel):
    """JWT token response"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: UUID
    role: UserRole


class LoginRequest(BaseModel):
    """Staff login by name and password"""
    username: str
    password: str
    role: Optional[UserRole] = None


class WhatsappLoginRequest(BaseModel):
    """Customer login by WhatsApp number"""
    whatsapp: str
    name: str


class UserCreate(BaseModel):
    """Create staff user request"""
    name: str
    whatsapp: Optional[str] = None
    password: str
    role: UserRole = UserRole.KITCHEN


class UserResponse(BaseModel):
    """User response"""
    id: UUID
    name: str
    whatsapp: Optional[str]
    role: UserRole
    is_blocked: bool
    created_at: datetime
    last_login: Optional[datetime]

    class Config:
        from_attributes = True
