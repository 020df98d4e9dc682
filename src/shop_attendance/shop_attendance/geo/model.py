from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        lat, lon = self.latitude, self.longitude
        if lat is None or lon is None or math.isnan(lat) or math.isnan(lon):
            return False
        return -90 <= lat <= 90 and -180 <= lon <= 180
