"""
Title parsing and canonicalization.

This package handles:
- Title cleanup (entities, site tails, listing ids, boilerplate)
- Brand resolution against the alias table
- The model matcher cascade and its confidence scores
- Model normalization and series detection

All logic is pure; tables are passed in explicitly.
"""

from __future__ import annotations

from .brands import canonicalize_brand_name, detect_brand_from_title, resolve_brand, strip_brands
from .matchers import Matcher, build_matchers, first_match
from .model_normalizer import detect_series, normalize_model
from .models import NO_MODEL, AliasEntry, ExtractionRecord, ParseResult
from .parser import TitleParser, build_brand_model_key, extract_model
from .tables import DEFAULT_TABLES, ParserTables
from .title_normalizer import extract_listing_id, normalize_title

__all__ = [
    "AliasEntry",
    "DEFAULT_TABLES",
    "ExtractionRecord",
    "Matcher",
    "NO_MODEL",
    "ParseResult",
    "ParserTables",
    "TitleParser",
    "build_brand_model_key",
    "build_matchers",
    "canonicalize_brand_name",
    "detect_brand_from_title",
    "detect_series",
    "extract_listing_id",
    "extract_model",
    "first_match",
    "normalize_model",
    "normalize_title",
    "resolve_brand",
    "strip_brands",
]
