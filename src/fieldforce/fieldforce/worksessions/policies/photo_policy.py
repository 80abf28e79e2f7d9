from __future__ import annotations

from ...core.exceptions import ValidationError
from .base import CheckInEvidence, CheckInPolicy


class PhotoRequiredPolicy(CheckInPolicy):
    """Sites flagged ``requires_photo`` need a photo with every check-in."""

    def check(self, evidence: CheckInEvidence) -> None:
        if not evidence.photo_url:
            raise ValidationError(f"A photo is required to check in at {evidence.site.name}")
