"""
Pipeline session state: ordered records, pagination cursor, loading flag.

Owned by CorrelationPipeline. The public surface is read-only; the mutators
are only called from the pipeline's two operations.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from pulse2tx.core.exceptions import FetchError


@dataclass
class EnrichedRecord:
    """A transaction signature with the heart rate around its block time."""

    signature: str
    timestamp: datetime
    metric: int | None = None  # bpm; None until enriched or when no data
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "signature": self.signature,
            "timestamp": self.timestamp.isoformat(),
            "metric": self.metric,
        }


class LoadingState(enum.Enum):
    IDLE = "idle"
    LOADING_INITIAL = "loading_initial"
    LOADING_MORE = "loading_more"


class PipelineState:
    def __init__(self) -> None:
        self._records: list[EnrichedRecord] = []
        self._cursor: str | None = None
        self._loading = LoadingState.IDLE
        self._exhausted = False
        self._last_error: FetchError | None = None

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[EnrichedRecord, ...]:
        return tuple(self._records)

    @property
    def cursor(self) -> str | None:
        return self._cursor

    @property
    def loading(self) -> LoadingState:
        return self._loading

    @property
    def is_loading(self) -> bool:
        return self._loading is not LoadingState.IDLE

    @property
    def is_loading_initial(self) -> bool:
        return self._loading is LoadingState.LOADING_INITIAL

    @property
    def is_loading_more(self) -> bool:
        return self._loading is LoadingState.LOADING_MORE

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def last_error(self) -> FetchError | None:
        return self._last_error

    # Mutators below: CorrelationPipeline only.

    def begin(self, loading: LoadingState) -> bool:
        """Take the loading slot; False (and no change) unless currently idle."""
        if loading is LoadingState.IDLE:
            raise ValueError("begin() needs a loading state")
        if self._loading is not LoadingState.IDLE:
            return False
        self._loading = loading
        return True

    def finish(self) -> None:
        self._loading = LoadingState.IDLE

    def reset(self) -> None:
        self._records = []
        self._cursor = None
        self._exhausted = False
        self._last_error = None

    def append_page(self, records: Sequence[EnrichedRecord]) -> None:
        """Commit a fully enriched page; cursor moves only for a non-empty page."""
        self._last_error = None
        if not records:
            self._exhausted = True
            return
        self._records.extend(records)
        self._cursor = records[-1].signature

    def record_error(self, error: FetchError) -> None:
        self._last_error = error
