from datetime import datetime
from typing import Optional

import pytz
from cachetools import TTLCache

from env import PROGRESS_MAX_ENTRIES, PROGRESS_TTL_SECONDS
from interfaces.productModels import ScanProgress


class ScanProgressStore:
    """In-memory progress of running barcode cascades, entries expire after the TTL."""

    def __init__(self, ttl: int = PROGRESS_TTL_SECONDS, maxsize: int = PROGRESS_MAX_ENTRIES):
        self.cache = TTLCache(maxsize=maxsize, ttl=ttl)

    def start(self, barcode: str, total_sources: int) -> ScanProgress:
        progress = ScanProgress(
            barcode=barcode,
            total_sources=total_sources,
            timestamp=datetime.now(tz=pytz.utc),
        )
        self.cache[barcode] = progress
        return progress

    def update(self, barcode: str, **fields) -> ScanProgress:
        progress = self.cache.get(barcode) or ScanProgress(barcode=barcode)
        progress = progress.model_copy(update={**fields, "timestamp": datetime.now(tz=pytz.utc)})
        self.cache[barcode] = progress
        return progress

    def mark_completed_source(self, barcode: str, source: str) -> ScanProgress:
        progress = self.cache.get(barcode) or ScanProgress(barcode=barcode)
        return self.update(barcode, completed_sources=[*progress.completed_sources, source])

    def complete(self, barcode: str, found: bool, source: Optional[str] = None, error: Optional[str] = None) -> ScanProgress:
        return self.update(barcode, found=found, is_complete=True, current_source=source, error=error)

    def get(self, barcode: str) -> Optional[ScanProgress]:
        return self.cache.get(barcode)
