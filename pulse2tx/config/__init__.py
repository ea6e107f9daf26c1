"""
Configuration management for pulse2tx.

Loads and validates settings from environment variables and an optional
.env file. Exposes a single source of truth for RPC and pipeline configuration.
"""

from pulse2tx.config.settings import Settings, get_settings, reset_settings_cache  # noqa: F401

__all__ = ["Settings", "get_settings", "reset_settings_cache"]
