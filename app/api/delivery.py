"""Delivery fee API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import get_optional_user
from app.database import get_db
from app.delivery.engine import DeliveryFeeEngine, DeliveryFeeUnresolved, get_fee_engine
from app.delivery.geocoding import AddressFields
from app.delivery.store import get_store_settings
from app.delivery.zones import DELIVERY_ZONES, DELIVERY_FEE_WARNING, neighborhoods_by_zone, zone_for_neighborhood
from app.models.user import User
from app.schemas.delivery import DeliveryCalculateRequest, DeliveryCalculateResponse, ZoneResponse

router = APIRouter()


@router.post("/calculate", response_model=DeliveryCalculateResponse)
async def calculate_delivery(
    request: DeliveryCalculateRequest,
    db: AsyncSession = Depends(get_db),
    engine: DeliveryFeeEngine = Depends(get_fee_engine),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """Price a delivery address: geocoded distance, falling back to the neighborhood table"""
    # The minimum-fee override is an operator decision
    if request.allow_minimum_fee and (current_user is None or not current_user.is_staff):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only staff can apply the minimum delivery fee",
        )

    address = AddressFields(
        street=request.street,
        number=request.number,
        neighborhood=request.neighborhood,
        city=request.city,
        state=request.state,
    )

    try:
        quote = await engine.calculate(
            address,
            await get_store_settings(db),
            allow_minimum_fee=request.allow_minimum_fee,
        )
    except DeliveryFeeUnresolved as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "delivery_unresolved", "message": e.message},
        )

    return DeliveryCalculateResponse(
        distance_km=quote.distance_km,
        fee=quote.fee,
        estimated_minutes=quote.estimated_minutes,
        customer_lat=quote.customer_lat,
        customer_lng=quote.customer_lng,
        within_range=quote.within_range,
        source=quote.source,
        zone=quote.zone,
    )


@router.get("/zones", response_model=List[ZoneResponse])
async def list_zones():
    """Delivery zones with their neighborhoods"""
    return [
        ZoneResponse(
            zone=zone.code,
            name=zone.name,
            description=zone.description,
            fee=float(zone.fee),
            neighborhoods=neighborhoods_by_zone(zone.code),
        )
        for zone in DELIVERY_ZONES.values()
    ]


@router.get("/neighborhoods/{name}")
async def lookup_neighborhood(name: str):
    """Zone and fee for a neighborhood name"""
    zone = zone_for_neighborhood(name)
    if zone is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Neighborhood not in delivery table", "warning": DELIVERY_FEE_WARNING},
        )

    return {
        "neighborhood": name,
        "zone": zone.code,
        "name": zone.name,
        "fee": float(zone.fee),
        "warning": DELIVERY_FEE_WARNING,
    }
