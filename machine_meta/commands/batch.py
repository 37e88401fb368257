from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable

from ..updater import ListingUpdater

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchReport:
    updated: int = 0
    failed: int = 0
    errors: dict[str, str] = field(default_factory=dict)


def run(updater: ListingUpdater, record_ids: Iterable[str], *, workers: int = 4) -> BatchReport:
    """
    Update records concurrently; a failing record never aborts the batch.

    Resolutions of the same brand/model key may race (see ``KeyResolver``).
    """
    report = BatchReport()
    ids = list(record_ids)
    if not ids:
        return report
    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        futures = {pool.submit(updater.update, record_id): record_id for record_id in ids}
        for future in as_completed(futures):
            record_id = futures[future]
            try:
                future.result()
            except Exception as exc:
                report.failed += 1
                report.errors[record_id] = str(exc)
                logger.warning("Failed to update %s: %s", record_id, exc)
            else:
                report.updated += 1
    logger.info("Batch finished: %d updated, %d failed", report.updated, report.failed)
    return report
