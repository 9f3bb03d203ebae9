"""
Store configuration using Pydantic settings.

Configuration comes from explicit mappings and environment variables,
resolved in a defined order. Supports a mock mode for local development.
"""

from .settings import (
    StoreSettings,
    configure_logging,
    get_settings,
    resolve_store_config,
)

__all__ = [
    "StoreSettings",
    "configure_logging",
    "get_settings",
    "resolve_store_config",
]
