"""
Application settings.

Resolves the environment once (see config.env) into a frozen Settings object
shared by the CLI and anything that builds a pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pulse2tx.config.env import (
    get_fetch_timeout_sec,
    get_heart_rate_csv,
    get_page_limit,
    get_request_timeout_sec,
    get_solana_network,
    get_solana_rpc_url,
)


@dataclass(frozen=True)
class Settings:
    solana_network: str
    rpc_url: str
    page_limit: int
    request_timeout_sec: float
    fetch_timeout_sec: float | None
    heart_rate_csv: Path | None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Raises:
        ValueError: when a numeric variable is malformed or out of range.
    """
    return Settings(
        solana_network=get_solana_network(),
        rpc_url=get_solana_rpc_url(),
        page_limit=get_page_limit(),
        request_timeout_sec=get_request_timeout_sec(),
        fetch_timeout_sec=get_fetch_timeout_sec(),
        heart_rate_csv=get_heart_rate_csv(),
    )


def reset_settings_cache() -> None:
    """Drop the cached Settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
