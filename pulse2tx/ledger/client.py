"""
Ledger signature client — one getSignaturesForAddress page per call.

Responsibilities:
- Build the JSON-RPC request (limit always present, before only when given).
- POST it with httpx and decode the envelope into SignatureInfo items.
- Map transport, decode and RPC-level failures onto the FetchError taxonomy.
No retries and no local state: the caller decides what a failed page means.
"""

from __future__ import annotations

from typing import Any

import httpx

from pulse2tx.core.exceptions import DecodeError, RemoteRejected, TransportError
from pulse2tx.ledger.models import RpcErrorInfo, SignatureInfo
from pulse2tx.pulse_logging import get_logger, short_address

logger = get_logger(__name__)

GET_SIGNATURES_METHOD = "getSignaturesForAddress"
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0


def build_signatures_request(
    address: str, limit: int, before: str | None = None
) -> dict[str, Any]:
    """Return the getSignaturesForAddress JSON-RPC body."""
    opts: dict[str, Any] = {"limit": limit}
    if before is not None:
        opts["before"] = before
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": GET_SIGNATURES_METHOD,
        "params": [address, opts],
    }


def parse_signatures_response(data: Any) -> list[SignatureInfo]:
    """
    Decode a response envelope into signature infos, preserving server order.

    Raises:
        RemoteRejected: envelope has a non-empty error member.
        DecodeError: envelope or result items are malformed.
    """
    if not isinstance(data, dict):
        raise DecodeError("RPC response is not a JSON object")
    err = data.get("error")
    if err:
        info = RpcErrorInfo.from_envelope(err)
        raise RemoteRejected(info.code, info.message)
    if "result" not in data or data["result"] is None:
        raise DecodeError("RPC response has no result")
    result = data["result"]
    if not isinstance(result, list):
        raise DecodeError(f"RPC result is {type(result).__name__}, expected list")
    infos: list[SignatureInfo] = []
    for idx, item in enumerate(result):
        if not isinstance(item, dict):
            raise DecodeError(f"result[{idx}] is not an object")
        try:
            infos.append(SignatureInfo.from_rpc_item(item))
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise DecodeError(f"result[{idx}] is malformed: {e!r}") from e
    return infos


class LedgerSignatureClient:
    """
    Async getSignaturesForAddress client.

    Owns an httpx.AsyncClient unless one is passed in (tests inject one with a
    MockTransport). Use as an async context manager or call aclose().
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
    ) -> None:
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        self._rpc_url = rpc_url.strip()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(request_timeout_sec)
        )

    async def __aenter__(self) -> "LedgerSignatureClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_page(
        self, address: str, limit: int, before: str | None = None
    ) -> list[SignatureInfo]:
        """
        Fetch one page of signatures for address, newest first, older than before.

        An empty list means there are no more pages.

        Raises:
            ValueError: empty address or limit < 1.
            TransportError: network failure, timeout, or non-2xx status.
            DecodeError: malformed body or result items.
            RemoteRejected: RPC error envelope.
        """
        if not address or not address.strip():
            raise ValueError("address must be non-empty")
        if limit < 1:
            raise ValueError("limit must be positive")

        body = build_signatures_request(address, limit, before)
        log = logger.bind(address=short_address(address), before=short_address(before), limit=limit)
        try:
            resp = await self._client.post(self._rpc_url, json=body)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.warning("ledger_fetch_page_failed", kind="http_status", status_code=status)
            raise TransportError(f"RPC HTTP {status}", status_code=status) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning("ledger_fetch_page_failed", kind="transport", error=str(e))
            raise TransportError(f"RPC transport error: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            log.warning("ledger_fetch_page_failed", kind="decode", error=str(e))
            raise DecodeError("RPC response is not valid JSON") from e

        try:
            infos = parse_signatures_response(data)
        except RemoteRejected as e:
            log.warning("ledger_fetch_page_failed", kind="rpc_error", code=e.code, error=e.message)
            raise
        except DecodeError as e:
            log.warning("ledger_fetch_page_failed", kind="decode", error=str(e))
            raise

        log.info("ledger_fetch_page_ok", count=len(infos))
        return infos
