from __future__ import annotations

from typing import Optional, Protocol


class Translator(Protocol):
    """Voice-note translation collaborator."""

    def translate(self, text: str, *, source_language: Optional[str], target_language: str) -> str:
        raise NotImplementedError


class PassthroughTranslator:
    """Default translator: returns the text unchanged."""

    def translate(self, text: str, *, source_language: Optional[str], target_language: str) -> str:
        return text
