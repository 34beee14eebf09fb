"""Customer address API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.address import Address
from app.models.order import Order
from app.models.user import User
from app.schemas.address import AddressCreate, AddressUpdate, AddressResponse
from app.api.auth import get_current_user

router = APIRouter()


def _check_access(user_id: UUID, current_user: User) -> None:
    if not current_user.is_staff and current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied to these addresses")


async def _clear_other_defaults(db: AsyncSession, user_id: UUID, keep_id: UUID) -> None:
    await db.execute(
        update(Address)
        .where(Address.user_id == user_id, Address.id != keep_id)
        .values(is_default=False)
    )


async def _get_address(db: AsyncSession, address_id: UUID) -> Address:
    address = await db.get(Address, address_id)
    if not address:
        raise HTTPException(status_code=404, detail="Address not found")
    return address


@router.get("/{user_id}", response_model=List[AddressResponse])
async def list_addresses(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List a customer's addresses, default first"""
    _check_access(user_id, current_user)

    result = await db.execute(
        select(Address)
        .where(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.created_at)
    )
    return result.scalars().all()


@router.post("", response_model=AddressResponse, status_code=201)
async def create_address(
    address_data: AddressCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create an address"""
    _check_access(address_data.user_id, current_user)

    address = Address(**address_data.model_dump())
    db.add(address)
    await db.flush()

    if address.is_default:
        await _clear_other_defaults(db, address.user_id, address.id)

    await db.commit()
    await db.refresh(address)
    return address


@router.patch("/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: UUID,
    address_data: AddressUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update an address"""
    address = await _get_address(db, address_id)
    _check_access(address.user_id, current_user)

    for field, value in address_data.model_dump(exclude_unset=True).items():
        setattr(address, field, value)

    if address.is_default:
        await _clear_other_defaults(db, address.user_id, address.id)

    await db.commit()
    await db.refresh(address)
    return address


@router.delete("/{address_id}", status_code=204)
async def delete_address(
    address_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an address no order points at"""
    address = await _get_address(db, address_id)
    _check_access(address.user_id, current_user)

    result = await db.execute(select(Order.id).where(Order.address_id == address_id).limit(1))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Address is used by an order")

    await db.delete(address)
    await db.commit()
