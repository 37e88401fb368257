from __future__ import annotations

import json
from typing import Optional

from ..core.parsing import ExtractionRecord, TitleParser


def format_record(record: ExtractionRecord) -> str:
    lines = [
        f"Brand: {record.brand}",
        f"Model: {record.model}",
        f"Normalized: {record.normalized_model}",
        f"Series: {record.series}",
        f"Listing ID: {record.listing_id}",
        f"BrandModel key: {record.brand_model_key}",
        f"Confidence: {record.confidence}",
    ]
    if record.debug_trace:
        lines.append("Trace:")
        lines.extend(f"  {stage}: {value}" for stage, value in record.debug_trace)
    return "\n".join(lines)


def run(parser: TitleParser, title: str, *, brand: Optional[str] = None, json_output: bool = False) -> None:
    record = parser.parse(title, brand=brand)
    if json_output:
        print(json.dumps(record.to_dict(), indent=2, sort_keys=True))
        return
    print(format_record(record))
