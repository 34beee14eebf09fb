"""Courier (motoboy) API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.motoboy import Motoboy
from app.models.order import Order
from app.models.user import User, UserRole
from app.schemas.motoboy import MotoboyCreate, MotoboyUpdate, MotoboyResponse
from app.api.auth import require_staff, require_admin, require_role

router = APIRouter()
logger = structlog.get_logger()


async def _find_motoboy_user(db: AsyncSession, whatsapp: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(User.whatsapp == whatsapp, User.role == UserRole.MOTOBOY)
    )
    return result.scalars().first()


async def _linked_motoboy(db: AsyncSession, user_id: UUID) -> Optional[Motoboy]:
    result = await db.execute(select(Motoboy).where(Motoboy.user_id == user_id))
    return result.scalars().first()


async def _ensure_user_unlinked(db: AsyncSession, user_id: UUID, motoboy_id: Optional[UUID] = None) -> None:
    """Reject linking a user that already belongs to another courier"""
    linked = await _linked_motoboy(db, user_id)
    if linked is not None and linked.id != motoboy_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already linked to another motoboy",
        )


async def _get_motoboy(db: AsyncSession, motoboy_id: UUID) -> Motoboy:
    motoboy = await db.get(Motoboy, motoboy_id)
    if not motoboy:
        raise HTTPException(status_code=404, detail="Motoboy not found")
    return motoboy


@router.get("", response_model=List[MotoboyResponse])
async def list_motoboys(
    active_only: bool = False,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """List couriers"""
    query = select(Motoboy).order_by(Motoboy.name)
    if active_only:
        query = query.where(Motoboy.is_active == True)  # noqa: E712

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/me", response_model=MotoboyResponse)
async def get_my_motoboy(
    current_user: User = Depends(require_role(UserRole.MOTOBOY)),
    db: AsyncSession = Depends(get_db),
):
    """Courier record of the logged-in motoboy user"""
    result = await db.execute(select(Motoboy).where(Motoboy.user_id == current_user.id))
    motoboy = result.scalars().first()

    if motoboy is None and current_user.whatsapp:
        result = await db.execute(select(Motoboy).where(Motoboy.whatsapp == current_user.whatsapp))
        motoboy = result.scalars().first()

    if motoboy is None:
        raise HTTPException(status_code=404, detail="Motoboy not found")

    return motoboy


@router.get("/by-whatsapp/{whatsapp}", response_model=MotoboyResponse)
async def get_motoboy_by_whatsapp(
    whatsapp: str,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """Find a courier by phone number"""
    result = await db.execute(select(Motoboy).where(Motoboy.whatsapp == whatsapp))
    motoboy = result.scalars().first()

    if not motoboy:
        raise HTTPException(status_code=404, detail="Motoboy not found")

    return motoboy


@router.get("/{motoboy_id}", response_model=MotoboyResponse)
async def get_motoboy(
    motoboy_id: UUID,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """Get courier details"""
    return await _get_motoboy(db, motoboy_id)


@router.post("", response_model=MotoboyResponse, status_code=201)
async def create_motoboy(
    motoboy_data: MotoboyCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Register a courier, linking it to the motoboy user with the same phone"""
    motoboy = Motoboy(**motoboy_data.model_dump())

    if motoboy.user_id is not None:
        await _ensure_user_unlinked(db, motoboy.user_id)
    else:
        user = await _find_motoboy_user(db, motoboy.whatsapp)
        # A user already tied to another courier stays with that courier
        if user and await _linked_motoboy(db, user.id) is None:
            motoboy.user_id = user.id

    db.add(motoboy)
    await db.commit()
    await db.refresh(motoboy)

    logger.info("Motoboy registered", motoboy_id=str(motoboy.id), linked=motoboy.user_id is not None)
    return motoboy


@router.patch("/{motoboy_id}", response_model=MotoboyResponse)
async def update_motoboy(
    motoboy_id: UUID,
    motoboy_data: MotoboyUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update a courier"""
    motoboy = await _get_motoboy(db, motoboy_id)
    update_data = motoboy_data.model_dump(exclude_unset=True)

    if update_data.get("user_id") is not None:
        await _ensure_user_unlinked(db, update_data["user_id"], motoboy_id)

    for field, value in update_data.items():
        setattr(motoboy, field, value)

    await db.commit()
    await db.refresh(motoboy)
    return motoboy


@router.delete("/{motoboy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_motoboy(
    motoboy_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a courier that never carried an order"""
    motoboy = await _get_motoboy(db, motoboy_id)

    result = await db.execute(select(Order.id).where(Order.motoboy_id == motoboy_id).limit(1))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Motoboy has orders; deactivate it instead",
        )

    await db.delete(motoboy)
    await db.commit()
