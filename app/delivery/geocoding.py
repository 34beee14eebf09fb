"""Nominatim geocoding client"""

from dataclasses import dataclass
from typing import Optional
import httpx
import structlog

from app.config import settings

logger = structlog.get_logger()


@dataclass
class AddressFields:
    street: str
    number: str
    neighborhood: str
    city: str = "São Paulo"
    state: str = "SP"


@dataclass
class GeocodingResult:
    lat: float
    lng: float
    display_name: str


def build_address_string(
    street: str,
    number: str,
    neighborhood: str,
    city: str,
    state: str,
) -> str:
    return f"{street}, {number}, {neighborhood}, {city}, {state}, Brasil"


class Geocoder:
    """
    Resolves free-form addresses to coordinates.

    Every failure (network error, non-200, unparsable body, empty result) is
    logged and reported as ``None``; nothing is raised to the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        country_codes: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.geocoding_url
        self.user_agent = user_agent or settings.geocoding_user_agent
        self.timeout = timeout or settings.geocoding_timeout_seconds
        self.country_codes = country_codes or settings.geocoding_country_codes
        self._transport = transport

    async def resolve_address(self, address: AddressFields) -> Optional[GeocodingResult]:
        query = build_address_string(
            address.street,
            address.number,
            address.neighborhood,
            address.city,
            address.state,
        )
        return await self.geocode(query)

    async def geocode(self, query: str) -> Optional[GeocodingResult]:
        params = {
            "q": query,
            "format": "json",
            "limit": "1",
            "countrycodes": self.country_codes,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            ) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.warning("Geocoding request failed", address=query, error=str(e))
            return None

        if response.status_code != 200:
            logger.warning(
                "Geocoding provider error",
                address=query,
                status_code=response.status_code,
            )
            return None

        try:
            results = response.json()
            if not results:
                logger.info("Geocoding returned no match", address=query)
                return None

            first = results[0]
            return GeocodingResult(
                lat=float(first["lat"]),
                lng=float(first["lon"]),
                display_name=first.get("display_name", ""),
            )
        except (ValueError, KeyError, TypeError, IndexError) as e:
            logger.warning(
                "Geocoding response unreadable",
                address=query,
                status_code=response.status_code,
                error=str(e),
            )
            return None
