"""
Fetch an account's recent transactions with the heart rate around each one.

Runs initial_fetch for ADDRESS, then load_more until --pages pages are loaded,
the history is exhausted, or a page fails. Prints one JSON object per record
(id, signature, timestamp, metric) to stdout; logs go to stderr.

Heart rate comes from a CSV export (timestamp, bpm) given by --heart-rate-csv
or PULSE2TX_HEART_RATE_CSV. Without one, read access counts as not granted and
every metric is null.

Usage:
  pulse2tx-fetch 9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka --pages 3 --heart-rate-csv hr.csv
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pulse2tx.biometrics import (
    BiometricWindowResolver,
    HeartRateAuthorization,
    InMemoryHeartRateStore,
    load_heart_rate_csv,
)
from pulse2tx.config import get_settings
from pulse2tx.config.env import MAX_PAGE_LIMIT, masked_rpc_url
from pulse2tx.ledger import LedgerSignatureClient
from pulse2tx.pipeline import CorrelationPipeline, EnrichedRecord, LoadStatus
from pulse2tx.pulse_logging import get_logger, short_address
from pulse2tx.utils.wallet_utils import normalize_wallet

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pulse2tx-fetch",
        description="Correlate Solana account transactions with heart rate",
    )
    ap.add_argument("address", help="Solana account public key (base58)")
    ap.add_argument("--pages", type=int, default=1, help="max pages to load (default 1)")
    ap.add_argument("--limit", type=int, default=None, help="signatures per page (default PULSE2TX_PAGE_LIMIT or 30)")
    ap.add_argument("--heart-rate-csv", type=Path, default=None, help="heart-rate CSV with timestamp,bpm columns")
    ap.add_argument("--no-heart-rate", action="store_true", help="skip heart-rate enrichment")
    ap.add_argument("--rpc-url", type=str, default=None, help="override SOLANA_RPC_URL / HELIUS_API_KEY")
    ap.add_argument("--timeout", type=float, default=None, help="seconds allowed per page (fetch + enrichment)")
    return ap


def _emit(records: tuple[EnrichedRecord, ...], start: int) -> int:
    for record in records[start:]:
        sys.stdout.write(json.dumps(record.to_dict()) + "\n")
    sys.stdout.flush()
    return len(records)


async def run(
    pipeline: CorrelationPipeline,
    address: str,
    pages: int,
) -> int:
    """Drive the pipeline for up to pages pages; return the exit code."""
    outcome = await pipeline.initial_fetch(address)
    printed = _emit(pipeline.records, 0)
    loaded = 1
    while outcome.status is LoadStatus.APPENDED and loaded < pages:
        outcome = await pipeline.load_more()
        printed = _emit(pipeline.records, printed)
        loaded += 1

    if outcome.status in (LoadStatus.FAILED, LoadStatus.TIMED_OUT):
        logger.error(
            "fetch_pulse_transactions_failed",
            address=short_address(address),
            status=outcome.status.value,
            error=str(outcome.error),
            records=printed,
        )
        return EXIT_FETCH_FAILED
    logger.info(
        "fetch_pulse_transactions_done",
        address=short_address(address),
        records=printed,
        exhausted=pipeline.exhausted,
    )
    return EXIT_OK


async def _main_async(args: argparse.Namespace, address: str) -> int:
    settings = get_settings()
    rpc_url = (args.rpc_url or "").strip() or settings.rpc_url
    limit = args.limit or settings.page_limit
    timeout = args.timeout if args.timeout is not None else settings.fetch_timeout_sec

    authorization = HeartRateAuthorization()
    store = InMemoryHeartRateStore()
    csv_path = args.heart_rate_csv or settings.heart_rate_csv
    if csv_path is not None and not args.no_heart_rate:
        store = load_heart_rate_csv(csv_path)
        authorization.grant()

    logger.info(
        "fetch_pulse_transactions_start",
        network=settings.solana_network,
        rpc_url=masked_rpc_url(rpc_url),
        page_limit=limit,
        pages=args.pages,
        heart_rate_samples=len(store),
    )
    resolver = BiometricWindowResolver(store, is_authorized=authorization)
    async with LedgerSignatureClient(rpc_url, request_timeout_sec=settings.request_timeout_sec) as client:
        pipeline = CorrelationPipeline(client, resolver, page_limit=limit, timeout_sec=timeout)
        return await run(pipeline, address, args.pages)


def main(argv: list[str] | None = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    try:
        address = normalize_wallet(args.address)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE
    if args.pages < 1:
        print("error: --pages must be at least 1", file=sys.stderr)
        return EXIT_USAGE
    if args.limit is not None and not (1 <= args.limit <= MAX_PAGE_LIMIT):
        print(f"error: --limit must be between 1 and {MAX_PAGE_LIMIT}", file=sys.stderr)
        return EXIT_USAGE
    if args.timeout is not None and args.timeout <= 0:
        print("error: --timeout must be positive", file=sys.stderr)
        return EXIT_USAGE

    try:
        return asyncio.run(_main_async(args, address))
    except (FileNotFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
