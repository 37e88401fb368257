from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Iterator, Optional, Sequence

from .core.dedup import normalize_key
from .errors import RecordNotFoundError, StoreUnavailableError

TEXT_FIELD_TYPE = "singleLineText"
LINK_FIELD_TYPE = "multipleRecordLinks"
COMPUTED_FIELD_TYPES = frozenset(
    {"formula", "rollup", "lookup", "createdTime", "lastModifiedTime", "autoNumber"}
)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    type: str = TEXT_FIELD_TYPE
    linked_table: Optional[str] = None
    is_primary: bool = False

    @property
    def is_computed(self) -> bool:
        return self.type in COMPUTED_FIELD_TYPES

    @property
    def is_link(self) -> bool:
        return self.type == LINK_FIELD_TYPE


def _decode_payload(raw: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return payload if isinstance(payload, dict) else {}


def cell_as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "checked" if value else ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        parts = []
        for item in value:
            if isinstance(item, dict):
                parts.append(str(item.get("name") or item.get("id") or ""))
            else:
                parts.append(cell_as_string(item))
        return ", ".join(p for p in parts if p)
    return json.dumps(value)


class RecordStore:
    """SQLite-backed store of named tables, typed fields and JSON records."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS tables (
                name TEXT PRIMARY KEY,
                created_at TEXT NOT NULL
            )
            """
        )
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS fields (
                table_name TEXT NOT NULL,
                name TEXT NOT NULL,
                type TEXT NOT NULL,
                linked_table TEXT,
                is_primary INTEGER NOT NULL DEFAULT 0,
                position INTEGER NOT NULL,
                PRIMARY KEY(table_name, name)
            )
            """
        )
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS records (
                record_id TEXT PRIMARY KEY,
                table_name TEXT NOT NULL,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        self._conn.execute("CREATE INDEX IF NOT EXISTS records_by_table ON records(table_name)")
        self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _guarded(self, action: str) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
            except sqlite3.Error as exc:
                raise StoreUnavailableError(f"Record store {action} failed: {exc}") from exc

    # schema

    def create_table(self, name: str, fields: Sequence[FieldSpec]) -> None:
        """Create ``name`` (or add missing fields to it). The first field is primary unless one is flagged."""
        if not fields:
            raise ValueError(f"Table {name!r} needs at least one field")
        has_primary = any(f.is_primary for f in fields)
        with self._guarded("create table") as conn:
            conn.execute(
                "INSERT INTO tables(name, created_at) VALUES(?, CURRENT_TIMESTAMP) ON CONFLICT(name) DO NOTHING",
                (name,),
            )
            cursor = conn.execute("SELECT COALESCE(MAX(position), -1) FROM fields WHERE table_name = ?", (name,))
            position = int(cursor.fetchone()[0]) + 1
            for idx, spec in enumerate(fields):
                primary = spec.is_primary or (not has_primary and idx == 0 and position == 0)
                conn.execute(
                    """
                    INSERT INTO fields(table_name, name, type, linked_table, is_primary, position)
                    VALUES(?, ?, ?, ?, ?, ?)
                    ON CONFLICT(table_name, name) DO NOTHING
                    """,
                    (name, spec.name, spec.type, spec.linked_table, 1 if primary else 0, position + idx),
                )
            conn.commit()

    def has_table(self, name: str) -> bool:
        with self._guarded("read") as conn:
            row = conn.execute("SELECT 1 FROM tables WHERE name = ?", (name,)).fetchone()
        return bool(row)

    def list_tables(self) -> list[str]:
        with self._guarded("read") as conn:
            rows = conn.execute("SELECT name FROM tables ORDER BY name").fetchall()
        return [row[0] for row in rows]

    def list_fields(self, table: str) -> list[FieldSpec]:
        with self._guarded("read") as conn:
            rows = conn.execute(
                "SELECT name, type, linked_table, is_primary FROM fields WHERE table_name = ? ORDER BY position",
                (table,),
            ).fetchall()
        return [
            FieldSpec(name=row[0], type=row[1], linked_table=row[2], is_primary=bool(row[3]))
            for row in rows
        ]

    def field_names(self, table: str) -> list[str]:
        return [spec.name for spec in self.list_fields(table)]

    def get_field(self, table: str, name: str) -> Optional[FieldSpec]:
        for spec in self.list_fields(table):
            if spec.name == name:
                return spec
        return None

    def primary_field(self, table: str) -> Optional[FieldSpec]:
        fields = self.list_fields(table)
        for spec in fields:
            if spec.is_primary:
                return spec
        return fields[0] if fields else None

    # records

    def create_record(self, table: str, values: dict[str, Any]) -> str:
        record_id = "rec" + uuid.uuid4().hex[:14]
        with self._guarded("create") as conn:
            if not conn.execute("SELECT 1 FROM tables WHERE name = ?", (table,)).fetchone():
                raise RecordNotFoundError(f"Table not found: {table}")
            conn.execute(
                "INSERT INTO records(record_id, table_name, payload, updated_at) VALUES(?, ?, ?, CURRENT_TIMESTAMP)",
                (record_id, table, json.dumps(values)),
            )
            conn.commit()
        return record_id

    def get_record(self, table: str, record_id: str) -> Optional[dict[str, Any]]:
        with self._guarded("read") as conn:
            row = conn.execute(
                "SELECT payload FROM records WHERE record_id = ? AND table_name = ?",
                (record_id, table),
            ).fetchone()
        if not row:
            return None
        return _decode_payload(row[0])

    def update_record(self, table: str, record_id: str, values: dict[str, Any]) -> None:
        """Merge ``values`` into an existing record."""
        with self._guarded("update") as conn:
            row = conn.execute(
                "SELECT payload FROM records WHERE record_id = ? AND table_name = ?",
                (record_id, table),
            ).fetchone()
            if not row:
                raise RecordNotFoundError(f"Record not found: {record_id}")
            payload = _decode_payload(row[0])
            payload.update(values)
            conn.execute(
                "UPDATE records SET payload = ?, updated_at = CURRENT_TIMESTAMP WHERE record_id = ?",
                (json.dumps(payload), record_id),
            )
            conn.commit()

    def list_records(self, table: str) -> list[tuple[str, dict[str, Any]]]:
        with self._guarded("read") as conn:
            rows = conn.execute(
                "SELECT record_id, payload FROM records WHERE table_name = ? ORDER BY rowid",
                (table,),
            ).fetchall()
        return [(row[0], _decode_payload(row[1])) for row in rows]

    def count_records(self, table: str) -> int:
        with self._guarded("read") as conn:
            row = conn.execute("SELECT COUNT(*) FROM records WHERE table_name = ?", (table,)).fetchone()
        return int(row[0])

    # brand/model key rows

    def find_by_key(self, collection: str, key: str) -> Optional[str]:
        primary = self.primary_field(collection)
        if primary is None:
            raise StoreUnavailableError(f"Unable to resolve primary field for linked table {collection!r}")
        needle = normalize_key(key)
        for record_id, payload in self.list_records(collection):
            value = cell_as_string(payload.get(primary.name))
            if value and normalize_key(value) == needle:
                return record_id
        return None

    def create_with_key(self, collection: str, key: str) -> str:
        primary = self.primary_field(collection)
        if primary is None:
            raise StoreUnavailableError(f"Unable to resolve primary field for linked table {collection!r}")
        return self.create_record(collection, {primary.name: key})
