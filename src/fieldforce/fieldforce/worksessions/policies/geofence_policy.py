from __future__ import annotations

from ...common.geo import haversine_distance_m
from ...core.exceptions import PolicyError
from .base import CheckInEvidence, CheckInPolicy


class GeofencePolicy(CheckInPolicy):
    """Reject check-ins farther than the site's radius from its center."""

    def check(self, evidence: CheckInEvidence) -> None:
        site = evidence.site
        if not site.has_geofence or evidence.location is None:
            return
        distance = haversine_distance_m(evidence.location, site.center)
        if distance > float(site.geofence_radius_m):
            raise PolicyError(
                f"You are {distance:.0f} m from {site.name}; check-in is allowed within {site.geofence_radius_m} m"
            )
