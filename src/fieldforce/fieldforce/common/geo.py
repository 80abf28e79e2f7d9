from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..core.constants import EARTH_RADIUS_M
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValidationError("Latitude must be between -90 and 90")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValidationError("Longitude must be between -180 and 180")

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> Optional["Coordinates"]:
        """Build from {"latitude": .., "longitude": ..}; None when absent."""
        if not payload:
            return None
        lat = payload.get("latitude")
        lng = payload.get("longitude")
        if lat in (None, "") and lng in (None, ""):
            return None
        if lat in (None, "") or lng in (None, ""):
            raise ValidationError("Both latitude and longitude are required")
        try:
            return cls(latitude=float(lat), longitude=float(lng))
        except (TypeError, ValueError):
            raise ValidationError("Coordinates must be numbers")

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


def haversine_distance_m(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in meters."""
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))
