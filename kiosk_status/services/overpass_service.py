"""
Overpass Service - OpenStreetMap Overpass API integration for kiosk lookup
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from kiosk_status.config import settings
from kiosk_status.errors import UpstreamUnavailable
from kiosk_status.schemas import KioskMetadata

logger = logging.getLogger(__name__)

OVERPASS_QUERY = """
[out:json][timeout:25];
(
  node["amenity"="atm"](around:{radius},{lat},{lng});
  node["amenity"="bank"]["atm"="yes"](around:{radius},{lat},{lng});
);
out body;
"""


def element_to_kiosk(element: Dict[str, Any]) -> Optional[KioskMetadata]:
    """
    Map a raw Overpass element to kiosk metadata.

    All tags are optional. Elements without coordinates (ways, relations)
    are skipped by returning None.
    """
    if element.get("id") is None or element.get("lat") is None or element.get("lon") is None:
        return None

    tags = element.get("tags") or {}
    street = tags.get("addr:street")
    city = tags.get("addr:city")
    address = None
    if street:
        address = f"{street}, {city}" if city else street

    return KioskMetadata(
        id=str(element["id"]),
        lat=float(element["lat"]),
        lng=float(element["lon"]),
        name=tags.get("name") or None,
        bank=tags.get("operator") or tags.get("brand") or None,
        address=address,
    )


class OverpassService:
    """
    Client for the Overpass API.

    Features:
    - ATM nodes and banks tagged atm=yes within a radius
    - Bounded total timeout; a timed out lookup fails instead of hanging
    - Retries on connection errors only
    """

    def __init__(
        self,
        base_url: str = settings.OVERPASS_URL,
        timeout: float = settings.OVERPASS_TIMEOUT_SEC,
        max_attempts: int = settings.OVERPASS_MAX_ATTEMPTS,
        retry_backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff
        self._transport = transport

    async def _post_query(self, query: str) -> Dict[str, Any]:
        """Make request to Overpass API with retries"""
        headers = {
            "User-Agent": settings.OVERPASS_USER_AGENT,
            "Content-Type": "text/plain",
            "Accept": "application/json"
        }

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.retry_backoff, max=10),
            retry=retry_if_exception_type(httpx.ConnectError),
            reraise=True,
        ):
            with attempt:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.post(self.base_url, content=query, headers=headers)
                    response.raise_for_status()
                    return response.json()

    async def fetch_kiosks(self, lat: float, lng: float, radius: int) -> List[KioskMetadata]:
        """
        Fetch kiosks around a point.

        Args:
            lat: Latitude of the search center
            lng: Longitude of the search center
            radius: Search radius in meters

        Returns:
            List of kiosk metadata

        Raises:
            UpstreamUnavailable: on timeout, transport or HTTP error, or an
                unreadable response
        """
        query = OVERPASS_QUERY.format(radius=int(radius), lat=lat, lng=lng)

        try:
            payload = await asyncio.wait_for(self._post_query(query), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"Overpass timeout for ({lat}, {lng}, {radius})")
            raise UpstreamUnavailable("Kiosk provider timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Overpass error for ({lat}, {lng}, {radius}): {e}")
            raise UpstreamUnavailable("Failed to fetch kiosks") from e
        except ValueError as e:
            logger.error(f"Overpass returned invalid JSON: {e}")
            raise UpstreamUnavailable("Failed to fetch kiosks") from e

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            logger.error("Overpass response has no elements list")
            raise UpstreamUnavailable("Failed to fetch kiosks")

        kiosks = []
        for element in elements:
            kiosk = element_to_kiosk(element) if isinstance(element, dict) else None
            if kiosk is not None:
                kiosks.append(kiosk)

        logger.info(f"Fetched {len(kiosks)} kiosks around ({lat}, {lng}) r={radius}")
        return kiosks


# Singleton instance
overpass_service = OverpassService()
