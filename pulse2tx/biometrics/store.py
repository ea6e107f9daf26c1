"""
Heart-rate sample stores.

A store answers one question: the mean bpm of samples whose start instant lies
in [start, end). InMemoryHeartRateStore keeps a sorted sample list; it is
filled from a CSV export (timestamp, bpm) by load_heart_rate_csv.
"""

from __future__ import annotations

import bisect
import csv
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Protocol

from pulse2tx.pulse_logging import get_logger

logger = get_logger(__name__)


class HeartRateStore(Protocol):
    async def average_between(self, start: datetime, end: datetime) -> float | None:
        """Mean bpm of samples with start <= t < end; None when there are none."""
        ...


@dataclass(frozen=True)
class HeartRateSample:
    timestamp: datetime  # timezone-aware, UTC
    bpm: float


def _as_utc(ts: datetime) -> datetime:
    # Naive datetimes are taken as UTC
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class InMemoryHeartRateStore:
    """Sorted in-memory samples with bisect window lookup."""

    def __init__(self, samples: Iterable[HeartRateSample] = ()) -> None:
        normalized = [HeartRateSample(_as_utc(s.timestamp), float(s.bpm)) for s in samples]
        normalized.sort(key=lambda s: s.timestamp)
        self._samples = normalized
        self._keys = [s.timestamp for s in normalized]

    def __len__(self) -> int:
        return len(self._samples)

    def samples_between(self, start: datetime, end: datetime) -> list[HeartRateSample]:
        lo = bisect.bisect_left(self._keys, _as_utc(start))
        hi = bisect.bisect_left(self._keys, _as_utc(end))
        return self._samples[lo:hi]

    async def average_between(self, start: datetime, end: datetime) -> float | None:
        window = self.samples_between(start, end)
        if not window:
            return None
        return sum(s.bpm for s in window) / len(window)


def _parse_timestamp(raw: str) -> datetime:
    """ISO 8601 or Unix seconds."""
    s = raw.strip()
    try:
        return datetime.fromtimestamp(float(s), tz=timezone.utc)
    except ValueError:
        pass
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(s))


def load_heart_rate_csv(path: Path) -> InMemoryHeartRateStore:
    """
    Load a heart-rate export with header columns timestamp, bpm.

    Rows with unparsable values are skipped and reported in one warning.

    Raises:
        FileNotFoundError: path does not exist.
        ValueError: header lacks timestamp or bpm.
    """
    if not path.is_file():
        logger.error("heart_rate_csv_missing", path=str(path))
        raise FileNotFoundError(f"Heart-rate CSV not found: {path}")

    samples: list[HeartRateSample] = []
    skipped = 0
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        fields = reader.fieldnames or []
        if "timestamp" not in fields or "bpm" not in fields:
            raise ValueError(f"{path}: CSV must have 'timestamp' and 'bpm' columns")
        for row in reader:
            try:
                samples.append(
                    HeartRateSample(
                        timestamp=_parse_timestamp(row.get("timestamp") or ""),
                        bpm=float((row.get("bpm") or "").strip()),
                    )
                )
            except (TypeError, ValueError, OverflowError, OSError):
                skipped += 1

    if skipped:
        logger.warning("heart_rate_csv_rows_skipped", path=str(path), skipped=skipped)
    logger.info("heart_rate_csv_loaded", path=str(path), samples=len(samples))
    return InMemoryHeartRateStore(samples)
