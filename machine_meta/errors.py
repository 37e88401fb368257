from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .core.parsing.models import ExtractionRecord


class MachineMetaError(Exception):
    """Base class for failures surfaced to callers."""


class MissingInputError(MachineMetaError, ValueError):
    """A required input (title, record id) is absent or blank."""


class RecordNotFoundError(MachineMetaError, LookupError):
    pass


class StoreUnavailableError(MachineMetaError, RuntimeError):
    """
    The record store failed during a read or create.

    When raised from the updater, ``record`` holds the extraction computed
    before the failure so callers can still log brand/model/series.
    """

    def __init__(self, message: str, *, record: Optional["ExtractionRecord"] = None) -> None:
        super().__init__(message)
        self.record = record
