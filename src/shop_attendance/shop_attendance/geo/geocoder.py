from __future__ import annotations

import logging
from typing import Mapping, Optional, Protocol

import requests

from ..core.constants import GEOCODER_TIMEOUT_SECONDS, LOCATION_UNAVAILABLE
from .distance import format_location
from .model import Coordinates

logger = logging.getLogger(__name__)

NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"

ROAD_KEYS = ("road", "street", "path", "pedestrian")
# most specific first
AREA_KEYS = (
    "ward",
    "suburb",
    "neighbourhood",
    "residential",
    "quarter",
    "village",
    "city_district",
    "borough",
    "district",
)
CITY_KEYS = ("city", "town", "municipality")


class ReverseGeocoder(Protocol):
    def place_name(self, latitude: float, longitude: float) -> str:
        raise NotImplementedError


def _first(address: Mapping[str, str], keys) -> Optional[str]:
    for key in keys:
        value = (address.get(key) or "").strip()
        if value:
            return value
    return None


def _overlaps(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a


def build_place_name(address: Mapping[str, str]) -> str:
    """Join road, area and city, skipping components already covered."""

    road = _first(address, ROAD_KEYS)
    house = (address.get("house_number") or "").strip()
    if road and house:
        road = f"{house} {road}"

    parts: list[str] = []
    if road:
        parts.append(road)

    area = _first(address, AREA_KEYS)
    if area and not any(_overlaps(area, p) for p in parts):
        parts.append(area)

    city = _first(address, CITY_KEYS)
    if city and not any(_overlaps(city, p) for p in parts):
        parts.append(city)

    return ", ".join(parts)


def fallback_place_name(latitude: Optional[float], longitude: Optional[float]) -> str:
    if latitude is None or longitude is None:
        return LOCATION_UNAVAILABLE
    if not Coordinates(latitude, longitude).is_valid:
        return LOCATION_UNAVAILABLE
    return format_location(latitude, longitude)


class NominatimGeocoder:
    """Best-effort reverse lookup against an OpenStreetMap Nominatim endpoint.

    Used for display and audit only. Never raises: any HTTP error, timeout or
    malformed payload degrades to raw coordinates.
    """

    def __init__(
        self,
        *,
        url: str = NOMINATIM_REVERSE_URL,
        timeout_seconds: float = GEOCODER_TIMEOUT_SECONDS,
        user_agent: str = "shop-attendance/1.0",
        session: Optional[requests.Session] = None,
    ):
        self._url = url
        self._timeout = float(timeout_seconds)
        self._user_agent = user_agent
        self._session = session or requests.Session()

    def place_name(self, latitude: float, longitude: float) -> str:
        try:
            resp = self._session.get(
                self._url,
                params={
                    "format": "json",
                    "lat": latitude,
                    "lon": longitude,
                    "zoom": 16,
                    "addressdetails": 1,
                },
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Reverse geocoding failed for (%s, %s): %s", latitude, longitude, e)
            return fallback_place_name(latitude, longitude)

        address = data.get("address") if isinstance(data, dict) else None
        name = build_place_name(address or {})
        return name or fallback_place_name(latitude, longitude)
