from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.geo import Coordinates


@dataclass(frozen=True)
class Site:
    """A client location where employees check in (a "company" in the UI)."""

    site_id: int
    name: str
    address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    requires_photo: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    geofence_radius_m: Optional[int] = None
    is_active: bool = True

    @property
    def has_geofence(self) -> bool:
        return self.latitude is not None and self.longitude is not None and bool(self.geofence_radius_m)

    @property
    def center(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=float(self.latitude), longitude=float(self.longitude))


@dataclass(frozen=True)
class Product:
    product_id: int
    name: str
    sku: Optional[str] = None
    unit: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Position:
    position_id: int
    title: str
    description: Optional[str] = None
    is_active: bool = True
