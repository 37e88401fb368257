"""
Static lookup tables for title parsing.

The defaults below cover the brands and product lines seen in scraped
machine-tool listings. ``ParserTables`` compiles them once; every parsing
stage receives the instance explicitly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .models import AliasEntry

DEFAULT_BRANDS: tuple[AliasEntry, ...] = (
    AliasEntry("Mazak", ("MAZAK", "YAMAZAKI MAZAK", "YAMAZAKI", "MAZAK OPTONICS")),
    AliasEntry("Okuma", ("OKUMA", "OKUMA AMERICA", "OKUMA & HOWA", "OKUMA-HOWA", "OKUMA HOWA")),
    AliasEntry("Makino", ("MAKINO", "LEBLOND MAKINO", "LEBLOND-MAKINO")),
    AliasEntry("DMG MORI", ("DMG MORI", "DMG-MORI", "MORI SEIKI", "MORI-SEIKI", "DMG")),
    AliasEntry("Zimmermann", ("ZIMMERMANN", "F. ZIMMERMANN", "FRIEDRICH ZIMMERMANN")),
    AliasEntry("Tacchi", ("TACCHI", "GIACOMO TACCHI", "TARNIO TACCHI")),
    AliasEntry("Grob", ("GROB", "GROB-WERKE", "GROB WERKE")),
    AliasEntry("Doosan", ("DOOSAN", "DN SOLUTIONS", "DN-SOLUTIONS", "DAEWOO")),
)

# Regex fragments, applied as a single case-insensitive whole-word alternation.
DEFAULT_STOP_PHRASES: tuple[str, ...] = (
    "CNC MACHINE TOOLS", "MACHINE TOOLS", "MULTI[- ]?TASKING MACHINES?", "EQUIPMENT FOR SALE",
    "MACHINING CENTERS?", "HORIZONTAL", "VERTICAL", "LASER", "MILL", "MILLS", "CENTER", "CENTERS",
    "MACHINES?", "CNC LATHES?", "CNC LATHE", "LATHES?", "LATHE", "5[- ]AXIS", "4[- ]AXIS",
    "3[- ]AXIS", "2[- ]AXIS", "AXIS", "USED", "NEW", "GOOD", "EXCELLENT", "NEEDS WORK",
    "PRODUCTS?", "CATALOG(?:UE)?", "SERIES", "EXPLORE", "GANTRY", "PALLETECH", "WATT", "WATTS",
    "TABLE", "CONTROL", "LIVE TOOL", "LIVE TOOLING", "VIDEO AVAILABLE", "UNDER POWER",
    "FOR SALE", "BAND SAWS",
)

DEFAULT_SERIES: tuple[str, ...] = (
    "INTEGREX", "VARIAXIS", "QUICK TURN", "QT NEXUS", "QTN", "QTS", "QTU", "SQT", "SMART",
    "MAZATECH", "VTC", "VCN", "MTV", "FG", "UN", "UD", "AJV", "HC NEXUS", "PFH", "FH", "FJV",
    "VQC", "MACTURN", "MULTUS", "LB", "LU", "MU", "MB", "GENOS", "CAPTAIN", "CADET", "LOC", "LT",
    "MX", "MA", "MILLAC", "IMPACT", "SPACE TURN", "DMU", "DMP", "DMV", "CLX", "CTX", "NRX", "NZX",
    "ULTRASONIC", "CVG", "PGV", "IGV", "GP", "MCC", "EDNC", "EDAF", "U", "L2", "MMC2", "FZP",
    "FZU", "FZ", "NLX", "LYNX", "PUMA",
)

DEFAULT_SITE_SUFFIXES: tuple[str, ...] = (
    "MachineTools.com",
    "Equipt",
    "Premier Equipment",
    "Revelation Machinery",
    "The Equipment Hub",
    "DMG MORI",
)


def flexible_pattern(term: str) -> str:
    """Escape ``term`` and let its internal whitespace match zero or more spaces."""
    return r"\s*".join(re.escape(part) for part in term.split())


def _alternation(fragments: Iterable[str]) -> str:
    return "(?:" + "|".join(fragments) + ")"


@dataclass(frozen=True)
class _BrandMatcher:
    canonical: str
    word_patterns: tuple[re.Pattern[str], ...]
    exact_patterns: tuple[re.Pattern[str], ...]


@dataclass(frozen=True)
class ParserTables:
    """Immutable tables plus the regular expressions derived from them."""

    brands: tuple[AliasEntry, ...] = DEFAULT_BRANDS
    stop_phrases: tuple[str, ...] = DEFAULT_STOP_PHRASES
    series: tuple[str, ...] = DEFAULT_SERIES
    site_suffixes: tuple[str, ...] = DEFAULT_SITE_SUFFIXES

    brand_matchers: tuple[_BrandMatcher, ...] = field(init=False, repr=False, compare=False)
    brand_regex: re.Pattern[str] = field(init=False, repr=False, compare=False)
    stop_regex: Optional[re.Pattern[str]] = field(init=False, repr=False, compare=False)
    site_suffix_regex: Optional[re.Pattern[str]] = field(init=False, repr=False, compare=False)
    series_word: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for entry in self.brands:
            key = " ".join(entry.canonical.upper().split())
            if not key:
                raise ValueError("Brand canonical names must not be empty")
            if key in seen:
                raise ValueError(f"Duplicate canonical brand: {entry.canonical}")
            seen.add(key)
        if not self.series:
            raise ValueError("Series table must not be empty")

        matchers = []
        all_terms: list[str] = []
        for entry in self.brands:
            terms = entry.terms()
            all_terms.extend(terms)
            matchers.append(
                _BrandMatcher(
                    canonical=entry.canonical,
                    word_patterns=tuple(
                        re.compile(r"\b" + flexible_pattern(t) + r"\b", re.IGNORECASE) for t in terms
                    ),
                    exact_patterns=tuple(
                        re.compile(flexible_pattern(t), re.IGNORECASE) for t in terms
                    ),
                )
            )
        object.__setattr__(self, "brand_matchers", tuple(matchers))

        # Longest spellings first so "OKUMA HOWA" is erased whole rather than as "OKUMA".
        ordered = sorted({flexible_pattern(t) for t in all_terms}, key=lambda p: (-len(p), p))
        brand_regex = re.compile(r"\b" + _alternation(ordered) + r"\b", re.IGNORECASE) if ordered else re.compile(r"(?!)")
        object.__setattr__(self, "brand_regex", brand_regex)

        stop_regex = None
        if self.stop_phrases:
            stop_regex = re.compile(r"\b" + _alternation(self.stop_phrases) + r"\b", re.IGNORECASE)
        object.__setattr__(self, "stop_regex", stop_regex)

        site_regex = None
        if self.site_suffixes:
            site_regex = re.compile(
                r"\s+-\s*" + _alternation(re.escape(s) for s in self.site_suffixes) + r"\b.*$",
                re.IGNORECASE,
            )
        object.__setattr__(self, "site_suffix_regex", site_regex)

        series_fragments = sorted({flexible_pattern(s) for s in self.series}, key=lambda p: (-len(p), p))
        object.__setattr__(self, "series_word", _alternation(series_fragments))

    @classmethod
    def build(
        cls,
        brands: Optional[Sequence[AliasEntry]] = None,
        stop_phrases: Optional[Sequence[str]] = None,
        series: Optional[Sequence[str]] = None,
        site_suffixes: Optional[Sequence[str]] = None,
    ) -> "ParserTables":
        return cls(
            brands=tuple(brands) if brands is not None else DEFAULT_BRANDS,
            stop_phrases=tuple(stop_phrases) if stop_phrases is not None else DEFAULT_STOP_PHRASES,
            series=tuple(s.upper() for s in series) if series is not None else DEFAULT_SERIES,
            site_suffixes=tuple(site_suffixes) if site_suffixes is not None else DEFAULT_SITE_SUFFIXES,
        )

    def canonical_series(self, word: str) -> str:
        """Map a matched series word (``QUICKTURN``, ``quick turn``) to its table entry."""
        if not word:
            return ""
        for entry in self.series:
            if re.fullmatch(flexible_pattern(entry), word.strip(), re.IGNORECASE):
                return entry
        return ""


DEFAULT_TABLES = ParserTables()
