from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from ..common.side_effects import run_with_timeout
from ..core.constants import LOCATION_TIMEOUT_SECONDS
from .model import Coordinates


class LocationProvider(Protocol):
    """Source of the device position for a clock action.

    Returns ``None`` when the position is unavailable (permission denied,
    no fix). Implementations may block; callers go through ``acquire_location``.
    """

    def current_position(self) -> Optional[Coordinates]:
        raise NotImplementedError


@dataclass(frozen=True)
class SubmittedLocationProvider:
    """Position the client device sent along with the request."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None

    def current_position(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        coords = Coordinates(float(self.latitude), float(self.longitude), self.accuracy)
        return coords if coords.is_valid else None


def acquire_location(
    provider: Optional[LocationProvider],
    *,
    timeout_seconds: float = LOCATION_TIMEOUT_SECONDS,
) -> Optional[Coordinates]:
    """Time-boxed position lookup; ``None`` on timeout, error or no provider."""

    if provider is None:
        return None
    if isinstance(provider, SubmittedLocationProvider):
        return provider.current_position()
    return run_with_timeout(provider.current_position, timeout_seconds, default=None)
