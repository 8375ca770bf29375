"""GitHub account linking for linkfolio.

A logged-in Discord user runs a second OAuth flow against GitHub. The
callback exchanges the GitHub code, fetches the GitHub identity, re-asks
Discord who owns the session token, and only then records the GitHub
account as verified on that Discord user's profile.

Every failure in the callback sends the browser back to the settings page
with ?error=<reason>; there is no JSON client on the other end.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from ..errors import ApiError
from ..models import ProfileRecord
from ..store import MergeFn, ProfileStore, ProfileStoreError
from .dependencies import AppState, get_app_state
from .providers.base import (
    InvalidTokenError,
    MissingTokenError,
    OAuthProvider,
    ProviderError,
    ProviderIdentity,
    TokenExchangeError,
)

logger = logging.getLogger(__name__)


class LinkState(str, Enum):
    """Steps of the linking callback."""

    REQUIRE_SESSION = "require_session"
    AWAITING_CODE = "awaiting_code"
    EXCHANGING_SECONDARY_TOKEN = "exchanging_secondary_token"
    FETCHING_SECONDARY_IDENTITY = "fetching_secondary_identity"
    VERIFYING_PRIMARY_SESSION = "verifying_primary_session"
    MERGING = "merging"
    LINKED = "linked"


class LinkingError(Exception):
    """The linking callback failed; reason is the ?error= value for the browser."""

    def __init__(self, state: LinkState, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.state = state
        self.reason = reason


def merge_verified_link(primary_id: str, identity: ProviderIdentity) -> MergeFn:
    """Build the store merge that records identity as a verified link."""

    def merge(current: ProfileRecord | None) -> ProfileRecord:
        base = current or ProfileRecord(primary_id=primary_id)
        return base.model_copy(
            update={
                "secondary_handle": identity.username,
                "secondary_verified": True,
                "secondary_provider_id": identity.id,
                "updated_at": datetime.now(timezone.utc),
            }
        )

    return merge


class LinkingFlow:
    """Runs the linking callback against one primary/secondary provider pair."""

    def __init__(self, primary: OAuthProvider, secondary: OAuthProvider, store: ProfileStore):
        self.primary = primary
        self.secondary = secondary
        self.store = store

    async def complete(self, primary_token: str | None, code: str | None) -> ProfileRecord:
        """
        Link the secondary account behind code to the session's primary user.

        Args:
            primary_token: Bearer token from the session cookie, if any
            code: Authorization code from the secondary provider

        Returns:
            The saved profile record

        Raises:
            LinkingError: With the reason to report to the browser
        """
        if not primary_token:
            raise LinkingError(LinkState.REQUIRE_SESSION, "not_authenticated")
        if not code:
            raise LinkingError(LinkState.AWAITING_CODE, "no_code")

        try:
            secondary_token = await self.secondary.exchange_code(code)
        except (TokenExchangeError, MissingTokenError) as e:
            raise LinkingError(
                LinkState.EXCHANGING_SECONDARY_TOKEN, "token_exchange_failed", str(e)
            ) from e

        try:
            linked = await self.secondary.get_user_info(secondary_token)
        except ProviderError as e:
            raise LinkingError(
                LinkState.FETCHING_SECONDARY_IDENTITY,
                f"{self.secondary.name}_user_fetch_failed",
                str(e),
            ) from e

        # The record key comes from the provider, never from the request
        try:
            owner = await self.primary.get_user_info(primary_token)
        except ProviderError as e:
            raise LinkingError(
                LinkState.VERIFYING_PRIMARY_SESSION, f"{self.primary.name}_auth_failed", str(e)
            ) from e

        try:
            record = await self.store.upsert(owner.id, merge_verified_link(owner.id, linked))
        except ProfileStoreError as e:
            raise LinkingError(LinkState.MERGING, "unknown", str(e)) from e

        logger.info(
            f"Linked {self.secondary.name} account {linked.username} "
            f"to {self.primary.name} user {owner.id}"
        )
        return record


def _settings_redirect(settings_url: str, **params: str) -> RedirectResponse:
    separator = "&" if "?" in settings_url else "?"
    return RedirectResponse(
        url=f"{settings_url}{separator}{urlencode(params)}", status_code=302
    )


def create_router(provider_name: str) -> APIRouter:
    """
    Create the linking router for the secondary provider.

    Only registered when the secondary provider is configured.
    """
    router = APIRouter(prefix=f"/api/{provider_name}", tags=["Linking"])

    @router.get("/connect")
    async def connect(request: Request, state: AppState = Depends(get_app_state)):
        """Start linking; requires an existing Discord session."""
        if not request.cookies.get(state.carrier.cookie_name):
            raise ApiError(401, f"Not authenticated with {state.providers.primary.name}")

        auth_url = state.providers.secondary.get_authorization_url()
        return RedirectResponse(url=auth_url, status_code=302)

    @router.get("/callback")
    async def callback(
        request: Request,
        code: str | None = Query(None, description="Authorization code from provider"),
        error: str | None = Query(None, description="Error code if authorization failed"),
        state: AppState = Depends(get_app_state),
    ):
        """Finish linking and send the browser back to the settings page."""
        settings_url = state.config.settings_url

        if error:
            logger.warning(f"{provider_name} authorization returned error: {error}")

        flow = LinkingFlow(state.providers.primary, state.providers.secondary, state.store)
        try:
            try:
                primary_token = state.carrier.read(request)
            except InvalidTokenError as e:
                raise LinkingError(
                    LinkState.VERIFYING_PRIMARY_SESSION,
                    f"{state.providers.primary.name}_auth_failed",
                    str(e),
                ) from e
            await flow.complete(primary_token, code)
        except LinkingError as e:
            logger.error(f"Linking failed while {e.state.value}: {e}")
            return _settings_redirect(settings_url, error=e.reason)
        except Exception:
            logger.exception(f"{provider_name} callback error")
            return _settings_redirect(settings_url, error="unknown")

        return _settings_redirect(settings_url, **{f"{provider_name}_connected": "true"})

    return router


def create_unconfigured_router(provider_name: str) -> APIRouter:
    """Stand-in for the linking router when the provider has no credentials."""
    router = APIRouter(prefix=f"/api/{provider_name}", tags=["Linking"])

    @router.get("/connect")
    async def connect(request: Request, state: AppState = Depends(get_app_state)):
        if not request.cookies.get(state.carrier.cookie_name):
            raise ApiError(401, f"Not authenticated with {state.providers.primary.name}")
        raise ApiError(500, f"OAuth not configured for {provider_name}")

    return router
