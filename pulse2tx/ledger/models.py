"""
Data models for getSignaturesForAddress results.

The RPC returns camelCase keys (blockTime, confirmationStatus); some gateways
re-encode them as snake_case. Both map onto the snake_case attributes here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def _pick(item: dict[str, Any], camel: str, snake: str) -> Any:
    if camel in item:
        return item[camel]
    return item.get(snake)


def _block_time(value: Any) -> int | None:
    if value is None:
        return None
    seconds = int(value)
    try:
        datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"blockTime {seconds} is out of range") from e
    return seconds


@dataclass(frozen=True)
class SignatureInfo:
    """
    One transaction signature from getSignaturesForAddress.

    Read-only input to the correlation pipeline; consumed once per page.
    """

    signature: str
    slot: int
    block_time: int | None  # Unix timestamp; None if not available
    err: Any  # None if success; opaque object from RPC if the tx failed
    memo: str | None = None
    confirmation_status: str | None = None  # processed | confirmed | finalized

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureInfo":
        """
        Build from a single result item.

        Raises:
            KeyError: signature or slot missing.
            TypeError / ValueError: fields of the wrong type, or a blockTime
                that is not a representable instant.
        """
        signature = item["signature"]
        if not isinstance(signature, str) or not signature:
            raise TypeError("signature must be a non-empty string")
        return cls(
            signature=signature,
            slot=int(item["slot"]),
            block_time=_block_time(_pick(item, "blockTime", "block_time")),
            err=item.get("err"),
            memo=item.get("memo"),
            confirmation_status=_pick(item, "confirmationStatus", "confirmation_status"),
        )


@dataclass(frozen=True)
class RpcErrorInfo:
    """The error member of a JSON-RPC response envelope."""

    code: int
    message: str

    @classmethod
    def from_envelope(cls, err: Any) -> "RpcErrorInfo":
        if isinstance(err, dict):
            try:
                code = int(err.get("code", 0))
            except (TypeError, ValueError):
                code = 0
            return cls(code=code, message=str(err.get("message", "")))
        return cls(code=0, message=str(err))
