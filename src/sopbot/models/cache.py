from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict


class CorpusCacheEntry(BaseModel):
    """Snapshot of the aggregated corpus. Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True)

    content: str  # Full corpus text, may be empty
    fetched_at: datetime
    ttl: timedelta

    def is_fresh(self, now: datetime) -> bool:
        return now - self.fetched_at < self.ttl
