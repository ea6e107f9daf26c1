"""
Structured logging for pulse2tx.

JSON logs with timestamp, level, event_type and address.
Use get_logger() in all modules.
"""

from pulse2tx.pulse_logging.logger import bind_address, get_logger, short_address

__all__ = ["bind_address", "get_logger", "short_address"]
