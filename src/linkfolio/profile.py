"""Profile endpoints for linkfolio."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from .auth.dependencies import AppState, get_app_state, get_current_identity
from .auth.providers.base import ProviderIdentity
from .errors import ApiError
from .models import MessageResponse, ProfileRecord, ProfileUpdateRequest
from .store import ProfileStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("")
async def get_profile(
    identity: ProviderIdentity = Depends(get_current_identity),
    state: AppState = Depends(get_app_state),
):
    """Return the caller's profile, or an empty one if nothing is stored yet."""
    try:
        record = await state.store.get(identity.id)
    except ProfileStoreError:
        raise ApiError(500, "Failed to load profile")

    if record is None:
        record = ProfileRecord(primary_id=identity.id)

    return record.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.api_route("", methods=["POST", "PUT"], response_model=MessageResponse)
async def update_profile(
    update: ProfileUpdateRequest,
    identity: ProviderIdentity = Depends(get_current_identity),
    state: AppState = Depends(get_app_state),
):
    """
    Update the caller's GitHub username.

    The username is stored as typed; only the linking flow can mark it
    verified, and an edit here leaves the stored flag alone.
    """
    if update.github_username is None:
        raise ApiError(400, "Missing github_username")

    handle = update.github_username.strip()

    def merge(current: ProfileRecord | None) -> ProfileRecord:
        base = current or ProfileRecord(primary_id=identity.id)
        return base.model_copy(
            update={"secondary_handle": handle, "updated_at": datetime.now(timezone.utc)}
        )

    try:
        await state.store.upsert(identity.id, merge)
    except ProfileStoreError:
        raise ApiError(500, "Failed to save profile")

    return MessageResponse(message="Profile updated successfully")
