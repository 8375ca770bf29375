"""Discord OAuth provider."""

from typing import Any

from .base import OAuthProvider, ProviderIdentity

# Discord OAuth URLs
DISCORD_AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"
DISCORD_USER_URL = "https://discord.com/api/users/@me"
DISCORD_CDN_URL = "https://cdn.discordapp.com"


def avatar_url(user_id: str, avatar: str | None) -> str | None:
    """Build the CDN URL for a Discord avatar hash, if the user has one."""
    if not avatar:
        return None
    return f"{DISCORD_CDN_URL}/avatars/{user_id}/{avatar}.png"


class DiscordProvider(OAuthProvider):
    """Discord OAuth2 provider.

    Discord expects the token request form-urlencoded.
    """

    token_request_encoding = "form"

    def parse_identity(self, data: dict[str, Any]) -> ProviderIdentity:
        user_id = str(data["id"])
        username = data["username"]
        avatar = data.get("avatar")

        return ProviderIdentity(
            provider=self.name,
            id=user_id,
            username=username,
            display_name=data.get("global_name") or username,
            avatar=avatar,
            avatar_url=avatar_url(user_id, avatar),
            raw_data=data,
        )
