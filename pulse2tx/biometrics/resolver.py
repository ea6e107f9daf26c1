"""
Biometric window resolver: average heart rate around an instant.

Window is [t - 30s, t + 30s): symmetric, 60 seconds wide, inclusive start and
exclusive end. Enrichment is best-effort: average_around never raises, it
returns None for missing authorization, an empty window, or a store failure.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Callable

from pulse2tx.biometrics.store import HeartRateStore
from pulse2tx.core.exceptions import (
    BiometricError,
    BiometricQueryError,
    NoAuthorization,
    NoSamples,
)
from pulse2tx.pulse_logging import get_logger

logger = get_logger(__name__)

WINDOW_HALF_WIDTH_SEC = 30.0


class HeartRateAuthorization:
    """Read-access flag owned by whoever runs the consent flow."""

    def __init__(self, granted: bool = False) -> None:
        self._granted = granted

    def grant(self) -> None:
        self._granted = True

    def revoke(self) -> None:
        self._granted = False

    def __call__(self) -> bool:
        return self._granted


class BiometricWindowResolver:
    def __init__(
        self,
        store: HeartRateStore,
        *,
        is_authorized: Callable[[], bool] = lambda: True,
        window_half_width_sec: float = WINDOW_HALF_WIDTH_SEC,
    ) -> None:
        if window_half_width_sec <= 0:
            raise ValueError("window_half_width_sec must be positive")
        self._store = store
        self._is_authorized = is_authorized
        self._half_width = timedelta(seconds=window_half_width_sec)

    def window(self, timestamp: datetime) -> tuple[datetime, datetime]:
        return timestamp - self._half_width, timestamp + self._half_width

    async def resolve(self, timestamp: datetime) -> int:
        """
        Truncated mean bpm in the window around timestamp.

        Raises:
            NoAuthorization: read access not granted (store is not queried).
            NoSamples: window is empty.
            BiometricQueryError: the store raised or returned a non-numeric
                or non-finite average.
        """
        if not self._is_authorized():
            raise NoAuthorization("heart-rate read access not granted")
        start, end = self.window(timestamp)
        try:
            avg = await self._store.average_between(start, end)
        except Exception as e:
            raise BiometricQueryError(str(e)) from e
        if avg is None:
            raise NoSamples(f"no heart-rate samples in [{start.isoformat()}, {end.isoformat()})")
        if isinstance(avg, bool) or not isinstance(avg, (int, float)):
            raise BiometricQueryError(f"store returned non-numeric average {avg!r}")
        if not math.isfinite(avg):
            raise BiometricQueryError(f"store returned non-finite average {avg!r}")
        return int(avg)

    async def average_around(self, timestamp: datetime) -> int | None:
        """Lenient resolve(): None instead of any BiometricError."""
        try:
            return await self.resolve(timestamp)
        except BiometricQueryError as e:
            logger.warning("heart_rate_query_failed", timestamp=timestamp.isoformat(), error=str(e))
            return None
        except BiometricError as e:
            logger.debug("heart_rate_unavailable", timestamp=timestamp.isoformat(), reason=type(e).__name__)
            return None
