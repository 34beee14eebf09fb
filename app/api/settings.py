"""Store settings API endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings as app_settings
from app.database import get_db
from app.delivery.store import get_store_settings
from app.models.store import StoreSettings
from app.models.user import User
from app.schemas.store import StoreSettingsUpdate, StoreSettingsResponse
from app.api.auth import require_admin

router = APIRouter()


def _default_settings() -> StoreSettings:
    return StoreSettings(
        delivery_rate_per_km=app_settings.default_delivery_rate_per_km,
        min_delivery_fee=app_settings.default_min_delivery_fee,
        max_delivery_distance=app_settings.default_max_delivery_distance_km,
        is_open=True,
    )


@router.get("", response_model=StoreSettingsResponse)
async def get_settings(db: AsyncSession = Depends(get_db)):
    """Store settings, or the configured defaults before the admin saves any"""
    return await get_store_settings(db) or _default_settings()


@router.patch("", response_model=StoreSettingsResponse)
async def update_settings(
    settings_data: StoreSettingsUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update store settings"""
    store = await get_store_settings(db)
    if store is None:
        store = _default_settings()
        db.add(store)

    for field, value in settings_data.model_dump(exclude_unset=True).items():
        setattr(store, field, value)

    await db.commit()
    await db.refresh(store)
    return store
