"""
Brand resolution against the alias table.

Two lookups are offered: ``canonicalize_brand_name`` for values that came
from a dedicated record field (the whole value must be a known spelling) and
``detect_brand_from_title`` for free text (any whole-word occurrence).
"""

from __future__ import annotations

from typing import Optional

from .tables import ParserTables
from .title_normalizer import collapse_whitespace


def canonicalize_brand_name(candidate: Optional[str], tables: ParserTables) -> str:
    """
    Return the canonical brand for a field value, or "" when unknown.

    "yamazaki  mazak" -> "Mazak"; "Mazak Corp" -> "" (not a whole-value match).
    """
    if not candidate:
        return ""
    cleaned = str(candidate).strip().upper()
    if not cleaned:
        return ""
    for matcher in tables.brand_matchers:
        for pattern in matcher.exact_patterns:
            if pattern.fullmatch(cleaned):
                return matcher.canonical
    return ""


def detect_brand_from_title(title: Optional[str], tables: ParserTables) -> str:
    """Return the first brand (in table order) with a whole-word hit in ``title``."""
    if not title:
        return ""
    upper = title.upper()
    for matcher in tables.brand_matchers:
        for pattern in matcher.word_patterns:
            if pattern.search(upper):
                return matcher.canonical
    return ""


def resolve_brand(
    field_value: Optional[str], title: Optional[str], tables: ParserTables
) -> tuple[str, str]:
    """
    Resolve the brand for a listing.

    Returns ``(canonical, brand_for_key)``. The field wins over the title; when
    neither resolves, the raw field value is still used for the key.
    """
    canonical = canonicalize_brand_name(field_value, tables)
    if not canonical:
        canonical = detect_brand_from_title(title, tables)
    brand_for_key = (canonical or (field_value or "")).strip()
    return canonical, brand_for_key


def strip_brands(text: str, tables: ParserTables) -> str:
    return collapse_whitespace(tables.brand_regex.sub(" ", text))
