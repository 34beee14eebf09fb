"""Delivery fee engine"""

from app.delivery.distance import FeeQuote, compute_fee, estimate_minutes, haversine_distance_km
from app.delivery.engine import DeliveryFeeEngine, DeliveryFeeUnresolved, DeliveryQuote, get_fee_engine
from app.delivery.geocoding import AddressFields, Geocoder, GeocodingResult, build_address_string
from app.delivery.zones import DELIVERY_ZONES, zone_for_neighborhood, fee_for_neighborhood

__all__ = [
    "FeeQuote",
    "compute_fee",
    "estimate_minutes",
    "haversine_distance_km",
    "DeliveryFeeEngine",
    "DeliveryFeeUnresolved",
    "DeliveryQuote",
    "get_fee_engine",
    "AddressFields",
    "Geocoder",
    "GeocodingResult",
    "build_address_string",
    "DELIVERY_ZONES",
    "zone_for_neighborhood",
    "fee_for_neighborhood",
]
