"""Config subsystem public API.

Provides:
    get_config() -> AggregatedConfig (dispatch/handlers/logging/metrics)
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

__all__ = [
    "AggregatedConfig",
    "get_config",
    "as_dict",
    "ConfigError",
    "clear_config_cache",
]
