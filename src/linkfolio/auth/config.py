"""Application configuration for linkfolio."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .providers.base import ProviderConfig
from .providers.discord import DISCORD_AUTHORIZE_URL, DISCORD_TOKEN_URL, DISCORD_USER_URL
from .providers.github import GITHUB_AUTHORIZE_URL, GITHUB_TOKEN_URL, GITHUB_USER_URL

logger = logging.getLogger(__name__)

PRIMARY_PROVIDER = "discord"
SECONDARY_PROVIDER = "github"

# Fixed lifetime of the primary session cookie
SESSION_MAX_AGE = 7 * 24 * 60 * 60


class ConfigError(ValueError):
    """Required configuration is missing or malformed."""

    pass


@dataclass
class AppConfig:
    """Configuration constructed once at startup and handed to create_app()."""

    primary: ProviderConfig

    # None disables the account-linking endpoints
    secondary: ProviderConfig | None = None

    frontend_url: str = "http://localhost:8080"
    settings_url: str = ""

    cookie_secure: bool = False

    # Optional secret used to sign the session cookie
    session_secret: str = ""

    profiles_file: str = "profiles.json"
    http_timeout: float = 10.0

    host: str = "127.0.0.1"
    port: int = 3001

    def __post_init__(self):
        """Validate configuration."""
        missing = [
            attr
            for attr in ("client_id", "client_secret", "redirect_uri")
            if not getattr(self.primary, attr)
        ]
        if missing:
            names = ", ".join(f"{self.primary.name.upper()}_{attr.upper()}" for attr in missing)
            raise ConfigError(f"Missing required {self.primary.name} configuration: {names}")

        self.frontend_url = self.frontend_url.rstrip("/")
        if not self.settings_url:
            self.settings_url = f"{self.frontend_url}/settings"

    @property
    def linking_enabled(self) -> bool:
        """Whether the secondary provider is configured."""
        return self.secondary is not None


def _read_secret_file(path: str) -> str:
    """Read a secret from a file path."""
    try:
        return Path(path).read_text().strip()
    except (FileNotFoundError, PermissionError):
        return ""


def _get_secret(name: str) -> str:
    """Read a secret from NAME, falling back to the file named by NAME_FILE."""
    value = os.environ.get(name, "")
    if not value:
        secret_file = os.environ.get(f"{name}_FILE", "")
        if secret_file:
            value = _read_secret_file(secret_file)
    return value


def _is_true(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def load_config() -> AppConfig:
    """Load application configuration from environment variables.

    Raises:
        ConfigError: If the primary provider credentials are incomplete
    """
    primary = ProviderConfig(
        name=PRIMARY_PROVIDER,
        client_id=os.environ.get("DISCORD_CLIENT_ID", ""),
        client_secret=_get_secret("DISCORD_CLIENT_SECRET"),
        redirect_uri=os.environ.get("DISCORD_REDIRECT_URI", ""),
        authorize_url=DISCORD_AUTHORIZE_URL,
        token_url=DISCORD_TOKEN_URL,
        user_info_url=DISCORD_USER_URL,
        scope="identify",
    )

    github_client_id = os.environ.get("GITHUB_CLIENT_ID", "")
    github_client_secret = _get_secret("GITHUB_CLIENT_SECRET")
    github_redirect_uri = os.environ.get("GITHUB_REDIRECT_URI", "")

    secondary = None
    if github_client_id and github_client_secret and github_redirect_uri:
        secondary = ProviderConfig(
            name=SECONDARY_PROVIDER,
            client_id=github_client_id,
            client_secret=github_client_secret,
            redirect_uri=github_redirect_uri,
            authorize_url=GITHUB_AUTHORIZE_URL,
            token_url=GITHUB_TOKEN_URL,
            user_info_url=GITHUB_USER_URL,
            scope="read:user",
        )
    elif github_client_id or github_client_secret or github_redirect_uri:
        logger.warning("GitHub OAuth partially configured; ignoring incomplete credentials")

    try:
        http_timeout = float(os.environ.get("HTTP_TIMEOUT", "10"))
        port = int(os.environ.get("PORT", "3001"))
    except ValueError as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e

    return AppConfig(
        primary=primary,
        secondary=secondary,
        frontend_url=os.environ.get("FRONTEND_URL", "http://localhost:8080"),
        settings_url=os.environ.get("SETTINGS_URL", ""),
        cookie_secure=_is_true(os.environ.get("COOKIE_SECURE", "")),
        session_secret=_get_secret("SESSION_SECRET"),
        profiles_file=os.environ.get("PROFILES_FILE", "profiles.json"),
        http_timeout=http_timeout,
        host=os.environ.get("HOST", "127.0.0.1"),
        port=port,
    )
