"""
Environment variable loading and validation for pulse2tx.

- SOLANA_NETWORK: mainnet | devnet (default: mainnet)
- SOLANA_RPC_URL: RPC endpoint (wins over everything else)
- HELIUS_API_KEY: Helius API key (builds the RPC URL when SOLANA_RPC_URL is unset)
- PULSE2TX_PAGE_LIMIT: signatures per page (default 30, 1-1000)
- PULSE2TX_FETCH_TIMEOUT_SEC: timeout for one fetch+enrich step (default: none)
- PULSE2TX_REQUEST_TIMEOUT_SEC: HTTP timeout per RPC request (default 30)
- PULSE2TX_HEART_RATE_CSV: heart-rate sample export used by the CLI
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is pulse2tx/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"
HELIUS_DEVNET_URL_TEMPLATE = "https://devnet.helius-rpc.com/?api-key={key}"

DEFAULT_PAGE_LIMIT = 30
MAX_PAGE_LIMIT = 1000  # getSignaturesForAddress hard cap
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0


def load_pulse_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides set vars."""
    load_dotenv(_ENV_PATH, override=False)


def get_solana_network() -> str:
    """
    Return SOLANA_NETWORK from env: mainnet | devnet.
    Default: mainnet (account history lives there).
    """
    load_pulse_env()
    raw = (os.getenv("SOLANA_NETWORK") or os.getenv("SOLANA_CLUSTER") or "mainnet").strip().lower()
    if raw == "devnet":
        return "devnet"
    return "mainnet"


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > HELIUS_API_KEY (network-specific) > public endpoint.
    """
    load_pulse_env()
    url = (os.getenv("SOLANA_RPC_URL") or "").strip()
    if url:
        return url
    network = get_solana_network()
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key:
        if network == "devnet":
            return HELIUS_DEVNET_URL_TEMPLATE.format(key=key)
        return HELIUS_MAINNET_URL_TEMPLATE.format(key=key)
    return DEVNET_RPC_URL if network == "devnet" else MAINNET_RPC_URL


def masked_rpc_url(url: str) -> str:
    """Hide the api-key query value so the URL can be logged."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url


def _float_env(name: str) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def get_page_limit() -> int:
    """Return PULSE2TX_PAGE_LIMIT (1-1000); default 30."""
    load_pulse_env()
    raw = (os.getenv("PULSE2TX_PAGE_LIMIT") or "").strip()
    if not raw:
        return DEFAULT_PAGE_LIMIT
    try:
        limit = int(raw)
    except ValueError:
        raise ValueError(f"PULSE2TX_PAGE_LIMIT must be an integer, got {raw!r}") from None
    if not (1 <= limit <= MAX_PAGE_LIMIT):
        raise ValueError(f"PULSE2TX_PAGE_LIMIT must be between 1 and {MAX_PAGE_LIMIT}")
    return limit


def get_fetch_timeout_sec() -> float | None:
    """Return PULSE2TX_FETCH_TIMEOUT_SEC, or None when no page timeout is configured."""
    load_pulse_env()
    return _float_env("PULSE2TX_FETCH_TIMEOUT_SEC")


def get_request_timeout_sec() -> float:
    """Return PULSE2TX_REQUEST_TIMEOUT_SEC; default 30."""
    load_pulse_env()
    return _float_env("PULSE2TX_REQUEST_TIMEOUT_SEC") or DEFAULT_REQUEST_TIMEOUT_SEC


def get_heart_rate_csv() -> Path | None:
    """Return PULSE2TX_HEART_RATE_CSV as a Path, or None."""
    load_pulse_env()
    raw = (os.getenv("PULSE2TX_HEART_RATE_CSV") or "").strip()
    return Path(raw) if raw else None
