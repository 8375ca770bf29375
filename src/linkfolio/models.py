"""Pydantic models for linkfolio API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .auth.providers.base import ProviderIdentity


class ProfileRecord(BaseModel):
    """A user's stored profile, keyed by Discord user id.

    Field aliases are the names used on the wire and in the profiles file.
    """

    model_config = ConfigDict(populate_by_name=True)

    primary_id: str = Field(alias="discord_id")
    secondary_handle: str = Field(default="", alias="github_username")
    secondary_verified: bool = Field(default=False, alias="github_verified")
    secondary_provider_id: str | None = Field(default=None, alias="github_id")
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def _verified_link_is_complete(self) -> "ProfileRecord":
        if self.secondary_verified and not self.secondary_provider_id:
            raise ValueError("A verified GitHub link requires github_id")
        return self

    def to_storage(self) -> dict:
        """Serialize for the profiles file, where the key carries discord_id."""
        return self.model_dump(
            mode="json", by_alias=True, exclude={"primary_id"}, exclude_none=True
        )

    @classmethod
    def from_storage(cls, primary_id: str, data: dict) -> "ProfileRecord":
        # The original store wrote github_id as a number
        if data.get("github_id") is not None:
            data = {**data, "github_id": str(data["github_id"])}
        return cls.model_validate({**data, "discord_id": primary_id})


class ProfileUpdateRequest(BaseModel):
    """Request to update the user-editable parts of a profile.

    Anything else in the body, github_verified included, is ignored.
    """

    github_username: str | None = None


class IdentityResponse(BaseModel):
    """Identity of the logged-in Discord user."""

    id: str
    username: str
    global_name: str
    avatar: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_identity(cls, identity: ProviderIdentity) -> "IdentityResponse":
        return cls(
            id=identity.id,
            username=identity.username,
            global_name=identity.display_name or identity.username,
            avatar=identity.avatar,
            avatar_url=identity.avatar_url,
        )


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
