"""Authentication API endpoints"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.database import get_db
from app.models.user import User, UserRole, STAFF_ROLES
from app.schemas.auth import Token, LoginRequest, WhatsappLoginRequest, UserCreate, UserResponse

router = APIRouter()
logger = structlog.get_logger()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash password"""
    return pwd_context.hash(password)


def create_access_token(user: User) -> str:
    """Create JWT access token"""
    expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(user.id),
        "role": user.role.value,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _token_response(user: User) -> Token:
    return Token(
        access_token=create_access_token(user),
        expires_in=settings.access_token_expire_minutes * 60,
        user_id=user.id,
        role=user.role,
    )


async def _user_from_token(token: str, db: AsyncSession) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
        user_id: str = payload.get("sub")
        token_type: str = payload.get("type")

        if user_id is None or token_type != "access":
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == UUID(user_id)))
    user = result.scalar_one_or_none()

    if user is None or user.is_blocked:
        raise credentials_exception

    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from token"""
    return await _user_from_token(token, db)


async def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Authenticated user when a token is sent, None for anonymous callers"""
    if token is None:
        return None
    return await _user_from_token(token, db)


def require_role(*roles: UserRole):
    """Dependency factory restricting an endpoint to the given roles"""
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user
    return role_checker


require_staff = require_role(*STAFF_ROLES)
require_admin = require_role(UserRole.ADMIN)


@router.post("/login", response_model=Token)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Staff login by name and password"""
    query = select(User).where(func.lower(User.name) == request.username.lower())
    if request.role:
        query = query.where(User.role == request.role)
    else:
        query = query.where(User.role.in_(STAFF_ROLES))

    result = await db.execute(query)
    user = next(
        (
            candidate for candidate in result.scalars().all()
            if candidate.hashed_password and verify_password(request.password, candidate.hashed_password)
        ),
        None,
    )

    if not user:
        logger.info("Login rejected", username=request.username, role=request.role)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is blocked",
        )

    user.last_login = datetime.utcnow()
    await db.commit()

    return _token_response(user)


@router.post("/whatsapp", response_model=Token)
async def whatsapp_login(
    request: WhatsappLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Customer login by WhatsApp number, registering the customer on first use"""
    result = await db.execute(
        select(User).where(User.whatsapp == request.whatsapp, User.role == UserRole.CUSTOMER)
    )
    user = result.scalars().first()

    if user is None:
        user = User(name=request.name, whatsapp=request.whatsapp, role=UserRole.CUSTOMER)
        db.add(user)
        logger.info("Customer registered", whatsapp=request.whatsapp)
    elif user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is blocked",
        )

    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    return _token_response(user)


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_staff_user(
    request: UserCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a staff account"""
    user = User(
        name=request.name,
        whatsapp=request.whatsapp,
        hashed_password=get_password_hash(request.password),
        role=request.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    return user


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """Get current user information"""
    return current_user
