"""
Brand/model key deduplication against a linked-record store.

The resolver looks a key up and creates a row only when none exists. In the
default ``racy`` mode the lookup and the create are two separate store calls,
so concurrent resolutions of the same key may both create a row. ``locked``
mode serializes resolutions of one key inside this process.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Iterator, Literal, Protocol

from ..errors import MachineMetaError, MissingInputError, StoreUnavailableError

logger = logging.getLogger(__name__)

DedupMode = Literal["racy", "locked"]
DEDUP_MODES: tuple[str, ...] = ("racy", "locked")


class LinkedRecordStore(Protocol):
    """Protocol for the collection holding one row per brand/model key."""

    def find_by_key(self, collection: str, key: str) -> str | None:
        """Return the id of the row whose primary value equals ``key`` (case-insensitive)."""
        ...

    def create_with_key(self, collection: str, key: str) -> str:
        """Create a row with ``key`` as its primary value and return its id."""
        ...


def normalize_key(key: str) -> str:
    return " ".join((key or "").split()).casefold()


@dataclass
class _KeyLock:
    lock: Lock = field(default_factory=Lock)
    holders: int = 0


class KeyResolver:
    def __init__(self, store: LinkedRecordStore, mode: DedupMode = "racy") -> None:
        if mode not in DEDUP_MODES:
            raise ValueError(f"Unknown dedup mode: {mode}")
        self.store = store
        self.mode = mode
        self._guard = Lock()
        self._key_locks: dict[tuple[str, str], _KeyLock] = {}

    def resolve(self, collection: str, key: str) -> str:
        """
        Return the row id for ``key`` in ``collection``, creating the row if needed.

        Raises:
            MissingInputError: key is blank
            StoreUnavailableError: the store failed during lookup or create
        """
        if not key or not key.strip():
            raise MissingInputError("Missing input: brand/model key")
        key = key.strip()
        if self.mode == "locked":
            with self._holding(collection, key):
                return self._find_or_create(collection, key)
        return self._find_or_create(collection, key)

    @contextmanager
    def _holding(self, collection: str, key: str) -> Iterator[None]:
        # Entries live only while some resolution holds or waits on them.
        token = (collection, normalize_key(key))
        with self._guard:
            entry = self._key_locks.setdefault(token, _KeyLock())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if not entry.holders:
                    del self._key_locks[token]

    def _find_or_create(self, collection: str, key: str) -> str:
        try:
            existing = self.store.find_by_key(collection, key)
        except MachineMetaError:
            raise
        except Exception as exc:
            raise StoreUnavailableError(f"Lookup of {key!r} in {collection!r} failed: {exc}") from exc
        if existing:
            logger.debug("Reusing %s row %s for %r", collection, existing, key)
            return existing
        try:
            created = self.store.create_with_key(collection, key)
        except MachineMetaError:
            raise
        except Exception as exc:
            raise StoreUnavailableError(f"Creating {key!r} in {collection!r} failed: {exc}") from exc
        logger.info("Created %s row %s for %r", collection, created, key)
        return created
