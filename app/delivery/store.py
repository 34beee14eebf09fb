"""Store settings access"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.store import StoreSettings


async def get_store_settings(db: AsyncSession) -> Optional[StoreSettings]:
    """The single store settings row, if one was saved"""
    result = await db.execute(select(StoreSettings).limit(1))
    return result.scalar_one_or_none()
