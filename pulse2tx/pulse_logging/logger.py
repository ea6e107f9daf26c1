"""
Logging setup for pulse2tx.

Every record is one structlog event written to stderr, so the CLI can keep
stdout for its JSON lines. An event carries a snake_case event_type (for
example pipeline_page_appended), an ISO-8601 UTC timestamp, the level, the
emitting module under "logger", and whatever fields the call site adds.
Account addresses and signatures are shortened with short_address() first.

LOG_LEVEL picks the threshold (default INFO). LOG_FORMAT=console switches from
JSON to the human-readable renderer. This module must not import other
pulse2tx modules, since all of them import it.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _stamp_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog's positional "event" to event_type and add a UTC timestamp."""
    if "event" in event_dict:
        event_dict.setdefault("event_type", event_dict.pop("event"))
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _processors(log_format: str) -> list[Any]:
    renderer: Any
    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    else:
        renderer = structlog.processors.JSONRenderer()
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _stamp_event,
        renderer,
    ]


def configure_logging(level: str = LOG_LEVEL, log_format: str = LOG_FORMAT) -> None:
    """Point structlog at stderr with the pulse2tx processor chain. Runs on first import."""
    structlog.configure(
        processors=_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger for one pulse2tx module, tagged with logger=name.

    The first argument to info/warning/... is the event_type; everything else
    is a keyword field, e.g.

        log = get_logger(__name__)
        log.warning("ledger_fetch_page_failed", kind="http_status", status_code=429)
    """
    return structlog.get_logger(name).bind(logger=name)


def short_address(address: str | None, keep: int = 8) -> str | None:
    """First keep characters of a base58 address or signature plus "...", for log fields."""
    if address is None:
        return None
    return address if len(address) <= keep else address[:keep] + "..."


def bind_address(address: str) -> structlog.BoundLogger:
    """Package-level logger with the shortened account address on every event."""
    return get_logger("pulse2tx").bind(address=short_address(address))
