"""OAuth2 authentication for linkfolio."""

from .config import AppConfig, ConfigError, ProviderConfig, load_config
from .session import SESSION_COOKIE, SessionCarrier

__all__ = [
    "AppConfig",
    "ConfigError",
    "ProviderConfig",
    "load_config",
    "SESSION_COOKIE",
    "SessionCarrier",
]
