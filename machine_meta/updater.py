from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .config import FieldMapping
from .core.dedup import KeyResolver
from .core.parsing import ExtractionRecord, TitleParser
from .errors import MissingInputError, RecordNotFoundError, StoreUnavailableError
from .store import RecordStore, cell_as_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpdateSummary:
    record_id: str
    record: ExtractionRecord
    written: tuple[str, ...]
    brand_model_row: Optional[str] = None

    def render(self) -> str:
        r = self.record
        lines = [
            f"Updated {self.record_id}",
            f"- Brand (resolved): {r.brand}",
            f"- Model: {r.model}",
            f"- Normalized: {r.normalized_model}",
            f"- BrandModel key: {r.brand_model_key}",
            f"- Confidence: {r.confidence}",
            f"- Series: {r.series}",
            f"- Listing ID: {r.listing_id}",
        ]
        return "\n".join(lines)


class ListingUpdater:
    """
    Reads one listing record, parses its title and writes the results back.

    Only attributes that exist on the listing table are written. The
    relationship attribute is resolved through ``KeyResolver`` when it links
    to another table, copied as text otherwise, and skipped when computed.
    """

    def __init__(
        self,
        store: RecordStore,
        parser: TitleParser,
        key_resolver: KeyResolver,
        *,
        table: str,
        field_map: FieldMapping,
        parser_version: str,
    ) -> None:
        self.store = store
        self.parser = parser
        self.key_resolver = key_resolver
        self.table = table
        self.field_map = field_map
        self.parser_version = parser_version

    def update(self, record_id: Optional[str]) -> UpdateSummary:
        if not self.table:
            raise MissingInputError("Missing input: table")
        if not record_id:
            raise MissingInputError("Missing input: record id")
        if not self.store.has_table(self.table):
            raise RecordNotFoundError(f"Table not found: {self.table}")
        payload = self.store.get_record(self.table, record_id)
        if payload is None:
            raise RecordNotFoundError(f"Record not found: {record_id}")

        fm = self.field_map
        title = cell_as_string(payload.get(fm.title)).strip()
        if not title:
            raise MissingInputError(f"Record {record_id} missing {fm.title!r}.")

        field_names = set(self.store.field_names(self.table))
        brand_field = next((name for name in fm.brand_candidates() if name in field_names), None)
        record_brand = cell_as_string(payload.get(brand_field)).strip() if brand_field else ""

        extraction = self.parser.parse(title, brand=record_brand or None)

        updates: dict[str, Any] = {}

        def maybe_set(name: str, value: Any) -> None:
            if name and name in field_names:
                updates[name] = value

        maybe_set(fm.model, extraction.model)
        maybe_set(fm.model_normalized, extraction.normalized_model)
        maybe_set(fm.confidence, extraction.confidence)
        maybe_set(fm.no_model, extraction.no_model_detected)
        maybe_set(fm.parser_version, self.parser_version)
        maybe_set(fm.debug, json.dumps([list(entry) for entry in extraction.debug_trace]))
        maybe_set(fm.listing_id, extraction.listing_id)
        maybe_set(fm.series, extraction.series)
        maybe_set(fm.brand_model_id, extraction.brand_model_key)

        try:
            row_id = self._apply_relationship(extraction, field_names, updates)
        except StoreUnavailableError as exc:
            logger.error(
                "Key resolution failed for %s (%r) after stage %r: %s",
                record_id,
                title,
                extraction.last_stage,
                exc,
            )
            raise StoreUnavailableError(str(exc), record=extraction) from exc

        self.store.update_record(self.table, record_id, updates)
        logger.info(
            "Updated %s: %s (confidence %.2f)",
            record_id,
            extraction.brand_model_key or extraction.model,
            extraction.confidence,
        )
        return UpdateSummary(
            record_id=record_id,
            record=extraction,
            written=tuple(sorted(updates)),
            brand_model_row=row_id,
        )

    def _apply_relationship(
        self, extraction: ExtractionRecord, field_names: set[str], updates: dict[str, Any]
    ) -> Optional[str]:
        name = self.field_map.brand_model
        key = extraction.brand_model_key
        if not name or name not in field_names or not key:
            return None
        spec = self.store.get_field(self.table, name)
        if spec is None or spec.is_computed:
            logger.debug("Skipping %r: computed field type", name)
            return None
        if not spec.is_link:
            updates[name] = key
            return None
        if not spec.linked_table:
            raise ValueError(f"Linked table missing for field {name!r}.")
        row_id = self.key_resolver.resolve(spec.linked_table, key)
        updates[name] = [{"id": row_id}]
        return row_id
