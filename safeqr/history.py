# safeqr/history.py

"""
In-memory scan history.

Records are appended once per accepted scan and listed newest first. Only
`raw_value` and `kind` come from the parser; storage beyond process memory is
left to whoever embeds this service.
"""

from __future__ import annotations

import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from safeqr.qr_scanner.qr_utils import ParsedScan

DEFAULT_MAX_RECORDS = 500
DEFAULT_DEDUPE_SECONDS = 3.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DateFilter(str, Enum):
    ALL = "all"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    def cutoff(self, now: Optional[datetime] = None) -> Optional[datetime]:
        days = _FILTER_DAYS.get(self.value)
        if days is None:
            return None
        return (now or _utcnow()) - timedelta(days=days)


_FILTER_DAYS = {"day": 1, "week": 7, "month": 30}


@dataclass
class ScanRecord:
    raw_value: str
    kind: str
    symbology: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    is_favorite: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "raw_value": self.raw_value,
            "kind": self.kind,
            "symbology": self.symbology,
            "created_at": self.created_at.isoformat(),
            "is_favorite": self.is_favorite,
        }


class ScanHistory:
    """Append-only log of scans, capped at `max_records` (oldest dropped first)."""

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS):
        self._records: deque = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def add(self, parsed: ParsedScan, symbology: Optional[str] = None,
            created_at: Optional[datetime] = None) -> ScanRecord:
        record = ScanRecord(
            raw_value=parsed.raw,
            kind=parsed.kind.value,
            symbology=symbology,
            created_at=created_at or _utcnow(),
        )
        with self._lock:
            self._records.append(record)
        return record

    def list(self, limit: Optional[int] = None) -> List[ScanRecord]:
        with self._lock:
            # reversed first so equal timestamps keep latest-added on top
            newest_first = sorted(reversed(self._records), key=lambda r: r.created_at, reverse=True)
        return newest_first[:max(limit, 0)] if limit is not None else newest_first

    def kind_options(self) -> List[str]:
        with self._lock:
            return sorted({r.kind for r in self._records})

    def filter(
        self,
        kind: Optional[str] = None,
        favorites_only: bool = False,
        date_filter: DateFilter = DateFilter.ALL,
        query: str = "",
        now: Optional[datetime] = None,
    ) -> List[ScanRecord]:
        result = self.list()

        # a kind that no record has (stale UI selection) filters nothing
        if kind and kind in self.kind_options():
            result = [r for r in result if r.kind == kind]

        if favorites_only:
            result = [r for r in result if r.is_favorite]

        cutoff = date_filter.cutoff(now)
        if cutoff is not None:
            result = [r for r in result if r.created_at >= cutoff]

        needle = query.strip().casefold()
        if needle:
            result = [r for r in result if needle in r.raw_value.casefold()]

        return result

    def toggle_favorite(self, record_id: str) -> ScanRecord:
        with self._lock:
            for record in self._records:
                if record.id == record_id:
                    record.is_favorite = not record.is_favorite
                    return record
        raise KeyError(record_id)

    def delete(self, record_ids: Iterable[str]) -> int:
        ids = set(record_ids)
        with self._lock:
            kept = [r for r in self._records if r.id not in ids]
            removed = len(self._records) - len(kept)
            self._records.clear()
            self._records.extend(kept)
        return removed

    def clear(self) -> int:
        with self._lock:
            removed = len(self._records)
            self._records.clear()
        return removed

    def export_text(self, record_ids: Iterable[str]) -> str:
        ids = set(record_ids)
        return "\n".join(r.raw_value for r in self.list() if r.id in ids)


class ScanThrottle:
    """
    Drops a repeat of the same payload seen within `window_seconds`.
    A live camera decodes the same code many times per second.
    """

    def __init__(self, window_seconds: float = DEFAULT_DEDUPE_SECONDS):
        self.window_seconds = window_seconds
        self._last_value: Optional[str] = None
        self._last_at: Optional[float] = None
        self._lock = threading.Lock()

    def should_accept(self, value: str, now: Optional[float] = None) -> bool:
        trimmed = value.strip()
        if not trimmed:
            return False

        now = time.monotonic() if now is None else now
        with self._lock:
            if (
                self._last_value == trimmed
                and self._last_at is not None
                and now - self._last_at < self.window_seconds
            ):
                return False
            self._last_value = trimmed
            self._last_at = now
        return True

    def reset(self) -> None:
        with self._lock:
            self._last_value = None
            self._last_at = None
