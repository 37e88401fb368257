"""
Model matcher cascade.

Each matcher is a compiled pattern with a fixed confidence. ``first_match``
walks them in order and returns the first hit; later matchers never override
an earlier one. Delimiter-bearing shapes come before the plain letters+digits
fallback because the fallback also catches serial counts and dimensions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .tables import ParserTables

ROMAN_SUFFIX = r"(?:\s*[IVX]+)?"
CODE_SUFFIX = r"(?:\s+(?:S|ST|M|Y|MY|MS|MSY|HP))?"
SUFFIXES = ROMAN_SUFFIX + CODE_SUFFIX

SERIES_TOKEN = r"[A-Za-z0-9][A-Za-z0-9\-/.]*" + SUFFIXES
LETTER_DELIMITED = r"[A-Z]{1,12}[A-Z0-9]*[-/][A-Z0-9/.\-]*[A-Z0-9]" + SUFFIXES
DIGIT_DELIMITED = r"[0-9][A-Z0-9]*[-/][A-Z0-9/.\-]*[A-Z0-9]" + SUFFIXES
ALNUM_FALLBACK = r"[A-Z]{1,12}\s?\d{2,6}[A-Z0-9]{0,6}" + SUFFIXES

LONE_INDEX_LETTER = re.compile(r"\b([ij])(?=\s*-?\s*\d)")


@dataclass(frozen=True)
class Matcher:
    name: str
    pattern: re.Pattern[str]
    confidence: float


@dataclass(frozen=True)
class MatchHit:
    matcher: Matcher
    token: str
    series_word: str = ""


def build_matchers(tables: ParserTables) -> tuple[Matcher, ...]:
    return (
        Matcher(
            "series_token",
            re.compile(
                r"\b(?P<series>" + tables.series_word + r")\s+(?P<token>" + SERIES_TOKEN + r")\b",
                re.IGNORECASE,
            ),
            0.96,
        ),
        Matcher("letter_delimited", re.compile(r"\b(?P<token>" + LETTER_DELIMITED + r")\b", re.IGNORECASE), 0.93),
        Matcher("digit_delimited", re.compile(r"\b(?P<token>" + DIGIT_DELIMITED + r")\b", re.IGNORECASE), 0.92),
        Matcher("alnum_fallback", re.compile(r"\b(?P<token>" + ALNUM_FALLBACK + r")\b", re.IGNORECASE), 0.88),
    )


def promote_index_letters(text: str) -> str:
    """Upper-case a lone ``i``/``j`` in front of a digit (``i-200`` -> ``I-200``)."""
    return LONE_INDEX_LETTER.sub(lambda m: m.group(1).upper(), text)


def first_match(text: str, matchers: Sequence[Matcher]) -> Optional[MatchHit]:
    for matcher in matchers:
        match = matcher.pattern.search(text)
        if not match:
            continue
        groups = match.groupdict()
        return MatchHit(
            matcher=matcher,
            token=match.group("token").strip(),
            series_word=(groups.get("series") or "").strip(),
        )
    return None
