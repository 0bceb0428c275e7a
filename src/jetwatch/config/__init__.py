"""jetwatch configuration system."""

from jetwatch.config.loader import ConfigError, resolve_config
from jetwatch.config.models import (
    ChatConfig,
    FallbackRule,
    ProbeConfig,
    ServiceEntry,
    TabEntry,
    WatchConfig,
)

__all__ = [
    "ChatConfig",
    "ConfigError",
    "FallbackRule",
    "ProbeConfig",
    "ServiceEntry",
    "TabEntry",
    "WatchConfig",
    "resolve_config",
]
