from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...common.geo import Coordinates
from ...sites.model import Site


@dataclass(frozen=True)
class CheckInEvidence:
    site: Site
    location: Optional[Coordinates]
    photo_url: Optional[str]


class CheckInPolicy(ABC):
    """Strategy Pattern: one evidence rule applied at check-in."""

    @abstractmethod
    def check(self, evidence: CheckInEvidence) -> None:
        """Raise a DomainError when the evidence does not satisfy the rule."""
        raise NotImplementedError
