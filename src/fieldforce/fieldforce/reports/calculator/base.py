from __future__ import annotations

from abc import ABC, abstractmethod

from ...worksessions.model import SessionReportRow


class HoursCalculator(ABC):
    """How many hours a session counts for in reports (Strategy Pattern)."""

    @abstractmethod
    def hours(self, row: SessionReportRow) -> float:
        raise NotImplementedError
