"""Delivery fee schemas"""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class DeliveryCalculateRequest(BaseModel):
    """Address fields to price"""
    street: str
    number: str
    neighborhood: str
    city: str = "São Paulo"
    state: str = "SP"
    # Operator override: price unknown neighborhoods at the minimum fee
    allow_minimum_fee: bool = False


class DeliveryCalculateResponse(BaseModel):
    """Delivery quote, field names kept for the storefront client"""
    model_config = ConfigDict(populate_by_name=True)

    distance_km: Optional[float] = Field(None, alias="distanciaKm")
    fee: float = Field(..., alias="taxaEntrega")
    estimated_minutes: Optional[int] = Field(None, alias="tempoEstimadoMinutos")
    customer_lat: Optional[float] = Field(None, alias="clienteLat")
    customer_lng: Optional[float] = Field(None, alias="clienteLng")
    within_range: bool = Field(True, alias="dentroDoRaio")
    source: str = Field(..., alias="origem")
    zone: Optional[str] = Field(None, alias="zona")


class ZoneResponse(BaseModel):
    """Delivery zone with its neighborhoods"""
    zone: str
    name: str
    description: str
    fee: float
    neighborhoods: List[str] = []
