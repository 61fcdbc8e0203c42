from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class TranslationResult:
    text: str
    engine: str
    detected_source_lang: str | None = None


class TranslationEngine(Protocol):
    """A machine-translation backend for stored fragments.

    ``translate`` returns one result per input text, in order. Language codes
    are the site's own (``en``, ``pt-br``); each engine maps them to its API.
    """

    name: str

    def translate(
        self, texts: list[str], source_lang: str, target_lang: str
    ) -> list[TranslationResult]:
        ...

    def language_codes(self, kind: str = "target") -> dict[str, str]:
        """Map of the engine's language codes to display names."""
        ...
