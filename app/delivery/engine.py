"""Delivery fee resolution: geocoded distance first, neighborhood zone table as fallback"""

from dataclasses import dataclass
from typing import Optional, Tuple
import structlog

from app.config import settings
from app.delivery.distance import compute_fee, estimate_minutes, haversine_distance_km
from app.delivery.geocoding import AddressFields, Geocoder
from app.delivery.zones import zone_for_neighborhood
from app.models.store import StoreSettings

logger = structlog.get_logger()

UNRESOLVED_MESSAGE = (
    "Não conseguimos calcular a taxa de entrega para este endereço. "
    "Confira o bairro informado ou aguarde nossa equipe definir a taxa."
)


class DeliveryFeeUnresolved(Exception):
    """Neither geocoding nor the zone table could price the address"""

    def __init__(self, neighborhood: str, message: str = UNRESOLVED_MESSAGE):
        super().__init__(message)
        self.neighborhood = neighborhood
        self.message = message


@dataclass
class DeliveryQuote:
    fee: float
    source: str  # "distance", "zone" or "minimum"
    distance_km: Optional[float] = None
    estimated_minutes: Optional[int] = None
    customer_lat: Optional[float] = None
    customer_lng: Optional[float] = None
    within_range: bool = True
    max_distance_km: Optional[float] = None
    zone: Optional[str] = None


def _number(value, default: float) -> float:
    return float(value) if value is not None else default


class DeliveryFeeEngine:
    """Turns a customer address into a delivery fee and an ETA"""

    def __init__(self, geocoder: Optional[Geocoder] = None):
        self.geocoder = geocoder or Geocoder()

    async def calculate(
        self,
        address: AddressFields,
        store: Optional[StoreSettings] = None,
        allow_minimum_fee: bool = False,
    ) -> DeliveryQuote:
        rate = _number(store.delivery_rate_per_km if store else None, settings.default_delivery_rate_per_km)
        min_fee = _number(store.min_delivery_fee if store else None, settings.default_min_delivery_fee)
        max_distance = _number(
            store.max_delivery_distance if store else None,
            settings.default_max_delivery_distance_km,
        )

        origin = await self._store_coordinates(store)
        customer = await self.geocoder.resolve_address(address) if origin else None

        if origin and customer:
            distance = haversine_distance_km(origin[0], origin[1], customer.lat, customer.lng)
            quote = compute_fee(distance, rate, min_fee, max_distance)

            if not quote.within_range:
                logger.info(
                    "Delivery address beyond max distance",
                    neighborhood=address.neighborhood,
                    distance_km=distance,
                    max_distance_km=max_distance,
                )

            return DeliveryQuote(
                fee=quote.fee,
                source="distance",
                distance_km=distance,
                estimated_minutes=estimate_minutes(
                    distance, settings.delivery_base_minutes, settings.delivery_speed_kmh
                ),
                customer_lat=customer.lat,
                customer_lng=customer.lng,
                within_range=quote.within_range,
                max_distance_km=max_distance,
            )

        zone = zone_for_neighborhood(address.neighborhood)
        if zone:
            logger.info(
                "Delivery fee resolved by zone table",
                neighborhood=address.neighborhood,
                zone=zone.code,
                fee=str(zone.fee),
            )
            return DeliveryQuote(
                fee=float(zone.fee),
                source="zone",
                estimated_minutes=estimate_minutes(
                    zone.radius_km, settings.delivery_base_minutes, settings.delivery_speed_kmh
                ),
                max_distance_km=max_distance,
                zone=zone.code,
            )

        if allow_minimum_fee:
            logger.info("Delivery fee set to minimum by operator", neighborhood=address.neighborhood)
            return DeliveryQuote(fee=round(min_fee, 2), source="minimum", max_distance_km=max_distance)

        logger.warning(
            "Delivery fee unresolved",
            street=address.street,
            neighborhood=address.neighborhood,
            city=address.city,
        )
        raise DeliveryFeeUnresolved(address.neighborhood)

    async def _store_coordinates(self, store: Optional[StoreSettings]) -> Optional[Tuple[float, float]]:
        if store is None:
            return None

        if store.store_lat is not None and store.store_lng is not None:
            return float(store.store_lat), float(store.store_lng)

        if store.store_address:
            result = await self.geocoder.geocode(f"{store.store_address}, Brasil")
            if result:
                return result.lat, result.lng

        return None


def get_fee_engine() -> DeliveryFeeEngine:
    """Fee engine backed by the configured geocoding provider"""
    return DeliveryFeeEngine()
