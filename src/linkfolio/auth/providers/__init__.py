"""OAuth2 providers for linkfolio."""

from dataclasses import dataclass

import httpx

from .base import (
    IdentityFetchError,
    InvalidTokenError,
    MissingTokenError,
    OAuthProvider,
    ProviderConfig,
    ProviderError,
    ProviderIdentity,
    TokenExchangeError,
)
from .discord import DiscordProvider
from .github import GitHubProvider

PROVIDER_CLASSES: dict[str, type[OAuthProvider]] = {
    "discord": DiscordProvider,
    "github": GitHubProvider,
}


@dataclass
class Providers:
    """The primary login provider and the optional provider linked to it."""

    primary: OAuthProvider
    secondary: OAuthProvider | None = None


def create_provider(
    config: ProviderConfig,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> OAuthProvider:
    """Instantiate the provider class registered for config.name."""
    try:
        provider_class = PROVIDER_CLASSES[config.name]
    except KeyError:
        raise ValueError(f"Unknown OAuth provider: {config.name}")
    return provider_class(config, timeout=timeout, transport=transport)


def build_providers(
    primary: ProviderConfig,
    secondary: ProviderConfig | None = None,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Providers:
    """Build the provider pair; secondary stays None when unconfigured."""
    return Providers(
        primary=create_provider(primary, timeout=timeout, transport=transport),
        secondary=(
            create_provider(secondary, timeout=timeout, transport=transport)
            if secondary is not None
            else None
        ),
    )


__all__ = [
    "DiscordProvider",
    "GitHubProvider",
    "IdentityFetchError",
    "InvalidTokenError",
    "MissingTokenError",
    "OAuthProvider",
    "ProviderConfig",
    "ProviderError",
    "ProviderIdentity",
    "Providers",
    "TokenExchangeError",
    "build_providers",
    "create_provider",
]
