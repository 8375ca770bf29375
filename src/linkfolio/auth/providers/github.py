"""GitHub OAuth provider."""

from typing import Any

from .base import OAuthProvider, ProviderIdentity

# GitHub OAuth URLs
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"

# GitHub rejects API requests without a User-Agent
USER_AGENT = "linkfolio"


class GitHubProvider(OAuthProvider):
    """GitHub OAuth2 provider.

    GitHub takes a JSON token request and reports token errors in a 200
    response body, which the base class already treats as a failed exchange.
    """

    token_request_encoding = "json"

    def _default_headers(self) -> dict[str, str]:
        headers = super()._default_headers()
        headers["User-Agent"] = USER_AGENT
        return headers

    def parse_identity(self, data: dict[str, Any]) -> ProviderIdentity:
        # GitHub hands out a full avatar URL rather than a hash
        avatar = data.get("avatar_url") or None

        return ProviderIdentity(
            provider=self.name,
            id=str(data["id"]),
            username=data["login"],
            display_name=data.get("name") or data["login"],
            avatar=avatar,
            avatar_url=avatar,
            raw_data=data,
        )
