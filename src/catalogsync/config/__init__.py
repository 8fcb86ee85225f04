"""Environment-driven configuration for catalogsync."""

from __future__ import annotations

from .env import optional_int_env_var
from .errors import ConfigurationError
from .logging import configure_logging
from .refresh import OfferRefreshConfig, get_offer_refresh_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "OfferRefreshConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_offer_refresh_config",
    "get_storage_config",
    "optional_int_env_var",
]
