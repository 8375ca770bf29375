"""Base OAuth provider interface."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Base class for OAuth provider failures."""

    pass


class TokenExchangeError(ProviderError):
    """The provider refused to exchange the authorization code."""

    pass


class MissingTokenError(ProviderError):
    """The token response did not contain an access token."""

    pass


class InvalidTokenError(ProviderError):
    """The provider rejected the access token (HTTP 401)."""

    pass


class IdentityFetchError(ProviderError):
    """The identity endpoint failed for a reason other than a dead token."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ProviderConfig:
    """Endpoints and credentials for one OAuth provider."""

    name: str
    client_id: str
    client_secret: str
    redirect_uri: str
    authorize_url: str
    token_url: str
    user_info_url: str
    scope: str


@dataclass
class ProviderIdentity:
    """User information from OAuth provider."""

    provider: str  # e.g., "discord"
    id: str  # Provider-specific user ID
    username: str  # Provider handle
    display_name: str | None = None
    avatar: str | None = None  # Provider-specific avatar reference
    avatar_url: str | None = None
    raw_data: dict[str, Any] | None = None


class OAuthProvider(ABC):
    """OAuth2 authorization-code client for a single provider.

    Subclasses choose how the token request is encoded and how the raw
    identity payload maps onto ProviderIdentity. Nothing here retries:
    authorization codes are single-use, so every failure is terminal for
    the current request.
    """

    # "form" or "json"
    token_request_encoding = "form"

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        """Provider name (e.g., 'discord')."""
        return self.config.name

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _default_headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}

    def get_authorization_url(self) -> str:
        """Generate the provider's authorization URL."""
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": self.config.scope,
        }
        return f"{self.config.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """
        Exchange authorization code for access token.

        Args:
            code: Authorization code from callback

        Returns:
            Access token from the provider

        Raises:
            TokenExchangeError: If the provider refuses the code
            MissingTokenError: If the response carries no access token
        """
        data = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.config.redirect_uri,
        }

        request_kwargs: dict[str, Any] = {"headers": self._default_headers()}
        if self.token_request_encoding == "json":
            request_kwargs["json"] = data
        else:
            request_kwargs["data"] = data

        async with self._client() as client:
            try:
                response = await client.post(self.config.token_url, **request_kwargs)
            except httpx.HTTPError as e:
                logger.error(f"{self.name} token request failed: {e}")
                raise TokenExchangeError(f"Token request failed: {e}") from e

        if not response.is_success:
            logger.error(f"{self.name} token exchange failed: {response.text}")
            raise TokenExchangeError(f"Token exchange failed: {response.status_code}")

        try:
            token_data = response.json()
        except ValueError as e:
            raise TokenExchangeError("Token response is not JSON") from e

        if not isinstance(token_data, dict):
            raise TokenExchangeError("Token response is not an object")

        if "error" in token_data:
            error = token_data.get("error_description", token_data["error"])
            logger.error(f"{self.name} token error: {error}")
            raise TokenExchangeError(f"Token error: {error}")

        access_token = token_data.get("access_token")
        if not access_token:
            raise MissingTokenError("No access token in response")

        return access_token

    async def get_user_info(self, access_token: str) -> ProviderIdentity:
        """
        Fetch user information using the access token.

        Args:
            access_token: Provider access token

        Returns:
            User information

        Raises:
            InvalidTokenError: If the provider answers 401
            IdentityFetchError: On any other failure
        """
        headers = self._default_headers()
        headers["Authorization"] = f"Bearer {access_token}"

        async with self._client() as client:
            try:
                response = await client.get(self.config.user_info_url, headers=headers)
            except httpx.HTTPError as e:
                logger.error(f"{self.name} user info request failed: {e}")
                raise IdentityFetchError(f"User info request failed: {e}") from e

        if response.status_code == 401:
            raise InvalidTokenError("Invalid or expired token")

        if not response.is_success:
            logger.error(f"{self.name} user info failed: {response.status_code}")
            raise IdentityFetchError(
                f"User info failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return self.parse_identity(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise IdentityFetchError(f"Malformed user info: {e}") from e

    @abstractmethod
    def parse_identity(self, data: dict[str, Any]) -> ProviderIdentity:
        """Map the provider's raw user payload to a ProviderIdentity."""
        pass
