from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_SHOP_RADIUS_METERS


@dataclass(frozen=True)
class ShopLocationConfig:
    """Geofence and per-channel switches for one shop."""

    shop_id: int
    shop_name: str
    latitude: Optional[float]
    longitude: Optional[float]
    radius_meters: float = DEFAULT_SHOP_RADIUS_METERS
    tag_id: Optional[str] = None
    tag_active: bool = False
    tag_enabled: bool = True
    code_enabled: bool = True
    require_gps: bool = False
    owner_pin_hash: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def effective_radius(self) -> float:
        return float(self.radius_meters or DEFAULT_SHOP_RADIUS_METERS)
