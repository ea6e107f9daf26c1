"""
Application-level exceptions.

Two failure domains:
- FetchError: a signature page could not be fetched. Terminal for that fetch
  attempt; nothing from the page is committed.
- BiometricError: a heart-rate window could not be resolved. Only ever degrades
  a single record's metric.
"""

from __future__ import annotations


class Pulse2TxError(Exception):
    """Base class for pulse2tx errors."""


class FetchError(Pulse2TxError):
    """A getSignaturesForAddress page fetch failed."""


class TransportError(FetchError):
    """Network failure, timeout, or non-2xx HTTP status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(FetchError):
    """Response body is not a well-formed JSON-RPC envelope or signature list."""


class RemoteRejected(FetchError):
    """The RPC envelope carried an error member."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


class FetchTimeout(FetchError):
    """A fetch+enrich step did not finish within the configured timeout."""

    def __init__(self, timeout_sec: float) -> None:
        super().__init__(f"page fetch timed out after {timeout_sec:g}s")
        self.timeout_sec = timeout_sec


class BiometricError(Pulse2TxError):
    """A heart-rate window could not be resolved."""


class NoAuthorization(BiometricError):
    """Heart-rate read access has not been granted."""


class NoSamples(BiometricError):
    """The heart-rate window contains no samples."""


class BiometricQueryError(BiometricError):
    """The heart-rate store raised while querying a window."""
