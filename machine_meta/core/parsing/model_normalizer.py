from __future__ import annotations

import re
from typing import Optional

from .models import NO_MODEL
from .tables import ParserTables

SPACED_HYPHEN = re.compile(r"\s*-\s*")
DIGIT_SPACE_LETTERS = re.compile(r"(\d)\s+([A-Z]+)")
LETTERS_SPACE_DIGIT = re.compile(r"\b([A-Z]+)\s+(\d)")
# VQC 20/40B would otherwise merge into VQC20 40B or lose its slash.
VQC_SPECIAL_CASE = re.compile(r"\bVQC\s*20\s*/?\s*40B\b")


def normalize_model(model: Optional[str]) -> str:
    """
    Canonical spacing/hyphenation for a matched model token.

    Idempotent: normalize_model(normalize_model(x)) == normalize_model(x).
    """
    if not model:
        return ""
    value = model.upper().strip()
    value = SPACED_HYPHEN.sub("-", value)
    value = DIGIT_SPACE_LETTERS.sub(r"\1\2", value)  # 100 S -> 100S
    value = LETTERS_SPACE_DIGIT.sub(r"\1\2", value)  # H 15 -> H15, DNM 4500 -> DNM4500
    value = VQC_SPECIAL_CASE.sub("VQC 20/40B", value)
    return re.sub(r"\s+", " ", value).strip()


def detect_series(model: Optional[str], tables: ParserTables, hint: str = "") -> str:
    """
    Return the product line a normalized model belongs to.

    The model itself is checked first; ``hint`` (the series word the
    series_token matcher anchored on) is used only when no prefix qualifies.
    """
    if not model or model == NO_MODEL:
        return ""
    upper = model.upper()
    for series in tables.series:
        if upper == series or upper.startswith(series + " "):
            return series
    return tables.canonical_series(hint)
