from __future__ import annotations

from ...core.exceptions import ValidationError
from .base import CheckInEvidence, CheckInPolicy


class LocationRequiredPolicy(CheckInPolicy):
    def check(self, evidence: CheckInEvidence) -> None:
        if evidence.location is None:
            raise ValidationError("GPS location is required to check in")
