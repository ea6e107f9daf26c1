"""
Correlation pipeline: signature pages in, heart-rate enriched records out.

State machine over LoadingState:
  IDLE --initial_fetch--> LOADING_INITIAL --> IDLE   (reset, fetch before=None)
  IDLE --load_more------> LOADING_MORE    --> IDLE   (fetch before=cursor)
Requests arriving while not IDLE are refused, never queued. Records in a page
are enriched one at a time in page order, so the heart-rate store never has
more than one outstanding query. A page is committed only once fully enriched;
a failed or timed-out fetch commits nothing and returns the pipeline to IDLE.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from pulse2tx.biometrics.resolver import BiometricWindowResolver
from pulse2tx.config.env import DEFAULT_PAGE_LIMIT
from pulse2tx.core.exceptions import FetchError, FetchTimeout
from pulse2tx.ledger.client import LedgerSignatureClient
from pulse2tx.ledger.models import SignatureInfo
from pulse2tx.pipeline.state import EnrichedRecord, LoadingState, PipelineState
from pulse2tx.pulse_logging import get_logger, short_address

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LoadStatus(enum.Enum):
    APPENDED = "appended"
    EXHAUSTED = "exhausted"  # server returned an empty page
    BUSY = "busy"  # another load was in flight; request refused
    NO_CURSOR = "no_cursor"  # load_more before any non-empty page
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class LoadOutcome:
    status: LoadStatus
    appended: int = 0
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.status in (LoadStatus.APPENDED, LoadStatus.EXHAUSTED)


class CorrelationPipeline:
    """
    One session's paginated fetch-and-correlate pipeline.

    Callers drive it with initial_fetch(address) and load_more(), and read
    records / cursor / loading flags. Nothing else mutates the state.
    """

    def __init__(
        self,
        client: LedgerSignatureClient,
        resolver: BiometricWindowResolver,
        *,
        page_limit: int = DEFAULT_PAGE_LIMIT,
        timeout_sec: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if page_limit < 1:
            raise ValueError("page_limit must be positive")
        if timeout_sec is not None and timeout_sec <= 0:
            raise ValueError("timeout_sec must be positive")
        self._client = client
        self._resolver = resolver
        self._page_limit = page_limit
        self._timeout_sec = timeout_sec
        self._clock = clock
        self._state = PipelineState()
        self._address: str | None = None

    @property
    def records(self) -> tuple[EnrichedRecord, ...]:
        return self._state.records

    @property
    def cursor(self) -> str | None:
        return self._state.cursor

    @property
    def address(self) -> str | None:
        return self._address

    @property
    def loading(self) -> LoadingState:
        return self._state.loading

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_loading_initial(self) -> bool:
        return self._state.is_loading_initial

    @property
    def is_loading_more(self) -> bool:
        return self._state.is_loading_more

    @property
    def exhausted(self) -> bool:
        return self._state.exhausted

    @property
    def last_error(self) -> FetchError | None:
        return self._state.last_error

    async def initial_fetch(self, address: str) -> LoadOutcome:
        """Start a new session for address: clear everything and load the newest page."""
        if not address or not address.strip():
            raise ValueError("address must be non-empty")
        if not self._state.begin(LoadingState.LOADING_INITIAL):
            logger.info("pipeline_request_refused", op="initial_fetch", loading=self._state.loading.value)
            return LoadOutcome(LoadStatus.BUSY)
        try:
            self._state.reset()
            address = address.strip()
            self._address = address
            return await self._load_page(address, before=None)
        finally:
            self._state.finish()

    async def load_more(self) -> LoadOutcome:
        """Load the next older page after the cursor; no-op when busy, unstarted, or exhausted."""
        if self._state.is_loading:
            logger.debug("pipeline_request_refused", op="load_more", loading=self._state.loading.value)
            return LoadOutcome(LoadStatus.BUSY)
        if self._state.exhausted:
            return LoadOutcome(LoadStatus.EXHAUSTED)
        address = self._address
        if self._state.cursor is None or address is None:
            return LoadOutcome(LoadStatus.NO_CURSOR)
        if not self._state.begin(LoadingState.LOADING_MORE):
            return LoadOutcome(LoadStatus.BUSY)
        try:
            return await self._load_page(address, before=self._state.cursor)
        finally:
            self._state.finish()

    async def _load_page(self, address: str, before: str | None) -> LoadOutcome:
        log = logger.bind(address=short_address(address), before=short_address(before))
        try:
            if self._timeout_sec is None:
                page = await self._fetch_and_enrich(address, before)
            else:
                page = await asyncio.wait_for(self._fetch_and_enrich(address, before), timeout=self._timeout_sec)
        except asyncio.TimeoutError:
            err = FetchTimeout(self._timeout_sec or 0.0)
            self._state.record_error(err)
            log.warning("pipeline_page_timed_out", timeout_sec=self._timeout_sec)
            return LoadOutcome(LoadStatus.TIMED_OUT, error=err)
        except FetchError as e:
            self._state.record_error(e)
            log.warning("pipeline_page_failed", error=str(e), kind=type(e).__name__)
            return LoadOutcome(LoadStatus.FAILED, error=e)

        self._state.append_page(page)
        if not page:
            log.info("pipeline_exhausted", total=len(self._state))
            return LoadOutcome(LoadStatus.EXHAUSTED)
        log.info(
            "pipeline_page_appended",
            count=len(page),
            enriched=sum(1 for r in page if r.metric is not None),
            total=len(self._state),
            cursor=short_address(self._state.cursor),
        )
        return LoadOutcome(LoadStatus.APPENDED, appended=len(page))

    async def _fetch_and_enrich(self, address: str, before: str | None) -> list[EnrichedRecord]:
        infos = await self._client.fetch_page(address, self._page_limit, before)
        page = [self._to_record(info) for info in infos]
        # Sequential on purpose: one heart-rate query outstanding at a time
        for record in page:
            record.metric = await self._resolver.average_around(record.timestamp)
        return page

    def _to_record(self, info: SignatureInfo) -> EnrichedRecord:
        if info.block_time is not None:
            ts = datetime.fromtimestamp(info.block_time, tz=timezone.utc)
        else:
            # No block time from the RPC: fall back to now
            ts = self._clock()
        return EnrichedRecord(signature=info.signature, timestamp=ts)
