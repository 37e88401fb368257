"""
Title parsing pipeline.

Runs normalizer -> brand erasure -> matcher cascade -> model normalizer ->
series detection for one title and assembles the ``ExtractionRecord``. The
pipeline is a pure function of (title, tables); the debug trace is returned,
never printed.
"""

from __future__ import annotations

import logging
from typing import Optional

from ...errors import MissingInputError
from .brands import resolve_brand, strip_brands
from .matchers import Matcher, build_matchers, first_match, promote_index_letters
from .model_normalizer import detect_series, normalize_model
from .models import NO_MODEL, ExtractionRecord, ParseResult
from .tables import DEFAULT_TABLES, ParserTables
from .title_normalizer import collapse_whitespace, extract_listing_id, normalize_title

logger = logging.getLogger(__name__)

NO_MODEL_CONFIDENCE = 0.1


def build_brand_model_key(brand: str, normalized_model: str) -> str:
    brand = (brand or "").strip()
    normalized_model = (normalized_model or "").strip()
    if not brand or not normalized_model:
        return ""
    return f"{brand} {normalized_model}"


def strip_stop_phrases(text: str, tables: ParserTables) -> str:
    if tables.stop_regex is None:
        return collapse_whitespace(text)
    return collapse_whitespace(tables.stop_regex.sub(" ", text))


def extract_model(
    title: Optional[str],
    tables: ParserTables = DEFAULT_TABLES,
    matchers: Optional[tuple[Matcher, ...]] = None,
) -> ParseResult:
    if not title:
        return ParseResult(model=NO_MODEL, confidence=0.0)

    cleaned, trace = normalize_title(title, tables)
    stripped = strip_stop_phrases(strip_brands(cleaned, tables), tables)
    trace.append(("strip brands+stops", stripped))
    if not stripped:
        return ParseResult(model=NO_MODEL, confidence=NO_MODEL_CONFIDENCE, debug_trace=tuple(trace))

    candidate = promote_index_letters(stripped)
    trace.append(("fixup", candidate))

    hit = first_match(candidate, matchers if matchers is not None else build_matchers(tables))
    if hit is None:
        return ParseResult(model=NO_MODEL, confidence=NO_MODEL_CONFIDENCE, debug_trace=tuple(trace))

    model = normalize_model(hit.token)
    trace.append((f"match:{hit.matcher.name}", model))
    return ParseResult(
        model=model,
        confidence=hit.matcher.confidence,
        debug_trace=tuple(trace),
        matcher=hit.matcher.name,
        series_hint=tables.canonical_series(hit.series_word),
    )


class TitleParser:
    """
    Turns listing titles into ``ExtractionRecord`` values.

    The tables and compiled matchers are built once per parser and shared by
    every call; nothing else is kept between calls.
    """

    def __init__(self, tables: ParserTables = DEFAULT_TABLES) -> None:
        self.tables = tables
        self.matchers = build_matchers(tables)

    def extract_model(self, title: Optional[str]) -> ParseResult:
        return extract_model(title, self.tables, self.matchers)

    def parse(self, title: Optional[str], brand: Optional[str] = None) -> ExtractionRecord:
        if not title or not title.strip():
            raise MissingInputError("Missing input: title")

        result = self.extract_model(title)
        canonical, brand_for_key = resolve_brand(brand, title, self.tables)
        normalized = normalize_model(result.model) if result.detected else ""
        series = detect_series(normalized, self.tables, result.series_hint) if normalized else ""
        record = ExtractionRecord(
            brand=brand_for_key,
            model=result.model,
            normalized_model=normalized,
            series=series,
            listing_id=extract_listing_id(title),
            brand_model_key=build_brand_model_key(brand_for_key, normalized),
            confidence=result.confidence,
            no_model_detected=not result.detected,
            debug_trace=result.debug_trace,
        )
        logger.debug(
            "Parsed %r -> brand=%r model=%r (%s, %.2f)",
            title,
            record.brand,
            record.model,
            result.matcher or "no match",
            record.confidence,
        )
        if not canonical and brand_for_key:
            logger.debug("Brand %r is not in the alias table; using it verbatim", brand_for_key)
        return record
