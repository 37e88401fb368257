"""
Domain models for title parsing.

These are pure data models with no dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

NO_MODEL = "No Model Detected"

TraceEntry = tuple[str, str]


@dataclass(frozen=True)
class AliasEntry:
    """
    One brand and the spellings that refer to it.

    Example:
        AliasEntry("DMG MORI", ("DMG MORI", "DMG-MORI", "MORI SEIKI", "DMG"))
    """
    canonical: str
    """Display name written to records and used in keys"""

    aliases: tuple[str, ...] = ()
    """Alternative spellings, matched case-insensitively as whole words"""

    def terms(self) -> tuple[str, ...]:
        """Canonical name followed by aliases, without duplicates."""
        seen: set[str] = set()
        out: list[str] = []
        for term in (self.canonical, *self.aliases):
            key = " ".join(term.upper().split())
            if key and key not in seen:
                seen.add(key)
                out.append(term)
        return tuple(out)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of the model matcher cascade for one title.
    """
    model: str
    """Normalized model, or NO_MODEL"""

    confidence: float
    """Fixed score of the matcher that won (0.0 to 1.0)"""

    debug_trace: tuple[TraceEntry, ...] = ()
    """Ordered (stage, intermediate string) pairs"""

    matcher: Optional[str] = None
    """Name of the winning matcher, None when nothing matched"""

    series_hint: str = ""
    """Series word anchored by the series_token matcher"""

    @property
    def detected(self) -> bool:
        return self.model != NO_MODEL


@dataclass(frozen=True)
class ExtractionRecord:
    brand: str
    model: str
    normalized_model: str
    series: str
    listing_id: str
    brand_model_key: str
    confidence: float
    no_model_detected: bool
    debug_trace: tuple[TraceEntry, ...] = ()

    @property
    def last_stage(self) -> str:
        if not self.debug_trace:
            return ""
        return self.debug_trace[-1][0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "brand": self.brand,
            "model": self.model,
            "normalized_model": self.normalized_model,
            "series": self.series,
            "listing_id": self.listing_id,
            "brand_model_key": self.brand_model_key,
            "confidence": self.confidence,
            "no_model_detected": self.no_model_detected,
            "debug_trace": [list(entry) for entry in self.debug_trace],
        }
