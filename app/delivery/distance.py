"""Distance and fee arithmetic for deliveries"""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371


@dataclass
class FeeQuote:
    distance: float
    fee: float
    within_range: bool
    max_distance: float


def haversine_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometers, rounded to 2 decimals"""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(d_lng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return round(EARTH_RADIUS_KM * c, 2)


def compute_fee(
    distance_km: float,
    rate_per_km: float,
    min_fee: float,
    max_distance_km: float,
) -> FeeQuote:
    """
    Price a delivery by distance.
    ``within_range`` is advisory: the caller decides whether to reject.
    """
    fee = max(distance_km * rate_per_km, min_fee)

    return FeeQuote(
        distance=distance_km,
        fee=round(fee, 2),
        within_range=distance_km <= max_distance_km,
        max_distance=max_distance_km,
    )


def estimate_minutes(distance_km: float, base_minutes: int, speed_kmh: float) -> int:
    """Preparation allowance plus riding time at an average courier speed"""
    return math.ceil(base_minutes + distance_km / speed_kmh * 60)
