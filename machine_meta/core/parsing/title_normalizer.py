from __future__ import annotations

import html
import re

from .models import TraceEntry
from .tables import ParserTables

DASH_PATTERN = re.compile(r"[–—]")
APOSTROPHE_PATTERN = re.compile(r"[‘’`]")
ELLIPSIS_PATTERN = re.compile(r"…|\.{3}$")

PIPE_TAIL_PATTERN = re.compile(r"\s*\|.*$")
LISTING_ID_TAIL_PATTERN = re.compile(r"\s*#\s?\d+\b.*$")
LISTING_ID_PATTERN = re.compile(r"#\s?(\d+)")

ACCESSORY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bUSED\b", re.IGNORECASE),
    re.compile(r"\bNEW\b", re.IGNORECASE),
    re.compile(r"\b(?:19|20)\d{2}[A-Za-z]?\b"),
    re.compile(r"\([^()]*\)"),
    re.compile(r"\bPALLETECH\b.*$", re.IGNORECASE),
    re.compile(r"/\s*GL-?\d+[A-Z0-9\-]*\s*(?:GANTRY)?", re.IGNORECASE),
    re.compile(r"\bWITH\s+[A-Z0-9\-]+(?:\s+[A-Z0-9\-]+)*\b", re.IGNORECASE),
    re.compile(r",\s*(?:LOW\s+HOURS|TOOLING\s+INCLUDED|UNDER\s+POWER|VIDEO\s+AVAILABLE)\b", re.IGNORECASE),
    # 12-1/2" style fractions, or a bare /<n> closing the title
    re.compile(r"/\s*\d+\s*(?:\"|$)"),
)


def collapse_whitespace(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def decode_entities(title: str) -> str:
    cleaned = html.unescape(title)
    cleaned = DASH_PATTERN.sub("-", cleaned)
    cleaned = APOSTROPHE_PATTERN.sub("'", cleaned)
    cleaned = ELLIPSIS_PATTERN.sub("", cleaned.strip())
    return cleaned.strip()


def strip_site_and_id(title: str, tables: ParserTables) -> str:
    cleaned = PIPE_TAIL_PATTERN.sub("", title)
    if tables.site_suffix_regex is not None:
        cleaned = tables.site_suffix_regex.sub("", cleaned)
    cleaned = LISTING_ID_TAIL_PATTERN.sub("", cleaned)
    return cleaned.strip()


def strip_accessories(title: str) -> str:
    cleaned = title
    for pattern in ACCESSORY_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return collapse_whitespace(cleaned)


def normalize_title(title: str, tables: ParserTables) -> tuple[str, list[TraceEntry]]:
    """
    Clean a raw listing title ahead of brand/model extraction.

    Returns the cleaned title and the trace of every stage, in order.
    """
    trace: list[TraceEntry] = []
    cleaned = decode_entities(title or "")
    trace.append(("normalized", cleaned))
    cleaned = strip_site_and_id(cleaned, tables)
    trace.append(("strip site/id", cleaned))
    cleaned = strip_accessories(cleaned)
    trace.append(("strip accessories", cleaned))
    return cleaned, trace


def extract_listing_id(title: str) -> str:
    """Listing number after a `#`, read from the entity-decoded title (`&#8211;` is not an id)."""
    match = LISTING_ID_PATTERN.search(decode_entities(title or ""))
    return match.group(1) if match else ""
