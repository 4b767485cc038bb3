"""Config subsystem public API.

Provides:
    get_config() -> AggregatedConfig (schema_version + section schemas)
    as_dict()    -> dict representation
    ConfigError  -> raised on validation / unknown key
"""

from .loader import (  # noqa: F401
    AggregatedConfig,
    get_config,
    as_dict,
    ConfigError,
    clear_config_cache,
)
from .schemas.directory import DeferConfig, RegistryConfig  # noqa: F401
from .schemas.observability import LoggingConfig  # noqa: F401


__all__ = [
    "AggregatedConfig",
    "DeferConfig",
    "LoggingConfig",
    "RegistryConfig",
    "get_config",
    "as_dict",
    "ConfigError",
    "clear_config_cache",
]
