"""
Pytest fixtures for pulse2tx tests.

The RPC boundary is an httpx.MockTransport serving scripted envelopes; the
heart-rate boundary is a recording in-memory store.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from pulse2tx.config import reset_settings_cache
from pulse2tx.ledger import LedgerSignatureClient

ADDRESS = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
RPC_URL = "https://rpc.test/"
T1 = 1_700_000_000

ENV_VARS = (
    "SOLANA_NETWORK",
    "SOLANA_CLUSTER",
    "SOLANA_RPC_URL",
    "HELIUS_API_KEY",
    "PULSE2TX_PAGE_LIMIT",
    "PULSE2TX_FETCH_TIMEOUT_SEC",
    "PULSE2TX_REQUEST_TIMEOUT_SEC",
    "PULSE2TX_HEART_RATE_CSV",
)


def utc(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def sig_item(signature: str, block_time: int | None = T1, slot: int = 250_000_000) -> dict[str, Any]:
    """One getSignaturesForAddress result item as the RPC encodes it."""
    return {
        "signature": signature,
        "slot": slot,
        "err": None,
        "memo": None,
        "blockTime": block_time,
        "confirmationStatus": "finalized",
    }


def ok_envelope(result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": 1, "result": result}


def error_envelope(code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}}


class ScriptedRpc:
    """
    MockTransport handler serving queued replies in order.

    A reply is an envelope dict (HTTP 200 JSON), an httpx.Response, or an
    exception to raise. Request bodies are recorded in .requests.
    """

    def __init__(self, *replies: Any) -> None:
        self.replies = list(replies)
        self.requests: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if not self.replies:
            return httpx.Response(200, json=ok_envelope([]))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)


def make_client(rpc: ScriptedRpc) -> LedgerSignatureClient:
    return LedgerSignatureClient(
        RPC_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(rpc)),
    )


class RecordingStore:
    """Heart-rate store returning canned averages keyed by window start; tracks concurrency."""

    def __init__(self, averages: dict[datetime, float] | None = None, fail_on: set[datetime] | None = None) -> None:
        self.averages = averages or {}
        self.fail_on = fail_on or set()
        self.queries: list[tuple[datetime, datetime]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def average_between(self, start: datetime, end: datetime) -> float | None:
        self.queries.append((start, end))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if start in self.fail_on:
                raise RuntimeError("store unavailable")
            return self.averages.get(start)
        finally:
            self.in_flight -= 1


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Strip pulse2tx / Solana variables and the cached Settings around every test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()
