from __future__ import annotations

from dataclasses import dataclass

from ..sites.model import Site
from .policies.base import CheckInPolicy
from .policies.geofence_policy import GeofencePolicy
from .policies.location_policy import LocationRequiredPolicy
from .policies.photo_policy import PhotoRequiredPolicy


@dataclass
class CheckInPolicyFactory:
    """Factory Pattern: choose the evidence rules for a site.

    ``require_location`` forces GPS everywhere; sites with a geofence always
    need GPS, and ``geofence_enforced`` decides whether the radius is checked.
    """

    require_location: bool = False
    geofence_enforced: bool = True

    def for_site(self, site: Site) -> list[CheckInPolicy]:
        policies: list[CheckInPolicy] = []
        if site.requires_photo:
            policies.append(PhotoRequiredPolicy())
        if self.require_location or site.has_geofence:
            policies.append(LocationRequiredPolicy())
        if self.geofence_enforced and site.has_geofence:
            policies.append(GeofencePolicy())
        return policies
