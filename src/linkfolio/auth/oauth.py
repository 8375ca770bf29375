"""Discord login endpoints for linkfolio."""

import logging
from enum import Enum

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse

from ..errors import ApiError
from ..models import IdentityResponse, MessageResponse
from .dependencies import AppState, get_app_state, get_current_identity
from .providers.base import (
    IdentityFetchError,
    InvalidTokenError,
    MissingTokenError,
    OAuthProvider,
    ProviderIdentity,
    TokenExchangeError,
)

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    """Steps of the login callback."""

    AWAITING_CODE = "awaiting_code"
    EXCHANGING_TOKEN = "exchanging_token"
    FETCHING_IDENTITY = "fetching_identity"
    SESSION_ESTABLISHED = "session_established"


class LoginError(Exception):
    """The login callback failed at a given step."""

    def __init__(self, state: AuthState, cause: Exception):
        super().__init__(f"Login failed while {state.value}: {cause}")
        self.state = state
        self.cause = cause


async def complete_login(provider: OAuthProvider, code: str) -> tuple[str, ProviderIdentity]:
    """
    Exchange a callback code and fetch the identity behind it.

    Returns:
        The access token and the identity it belongs to

    Raises:
        LoginError: Wrapping the provider error and the step it happened in
    """
    state = AuthState.EXCHANGING_TOKEN
    try:
        token = await provider.exchange_code(code)
        state = AuthState.FETCHING_IDENTITY
        identity = await provider.get_user_info(token)
    except Exception as e:
        raise LoginError(state, e) from e

    return token, identity


def _login_error_response(error: LoginError) -> ApiError:
    cause = error.cause
    if isinstance(cause, (TokenExchangeError, MissingTokenError)):
        return ApiError(400, "Failed to exchange code for token")
    if isinstance(cause, InvalidTokenError):
        return ApiError(401, "Invalid or expired token")
    if isinstance(cause, IdentityFetchError):
        return ApiError(500, "Failed to fetch user data")
    return ApiError(500, "Internal server error")


def create_router(provider_name: str) -> APIRouter:
    """
    Create the login router for the primary provider.

    Args:
        provider_name: Path segment for the routes, e.g. "discord"
    """
    router = APIRouter(prefix=f"/api/{provider_name}", tags=["Auth"])

    @router.get("/login")
    async def login(state: AppState = Depends(get_app_state)):
        """Redirect the browser to the provider's consent page."""
        auth_url = state.providers.primary.get_authorization_url()
        return RedirectResponse(url=auth_url, status_code=302)

    @router.get("/callback")
    async def callback(
        code: str | None = Query(None, description="Authorization code from provider"),
        error: str | None = Query(None, description="Error code if authorization failed"),
        error_description: str | None = Query(None, description="Error description"),
        state: AppState = Depends(get_app_state),
    ):
        """
        Handle the provider callback.

        Exchanges the code, confirms the identity and stores the token in
        the session cookie before sending the browser back to the frontend.
        """
        if not code:
            if error:
                logger.error(f"OAuth callback error: {error} - {error_description}")
                raise ApiError(400, error_description or error)
            raise ApiError(400, "Missing authorization code")

        try:
            token, identity = await complete_login(state.providers.primary, code)
        except LoginError as e:
            logger.error(str(e))
            raise _login_error_response(e)

        logger.info(f"OAuth login successful: {identity.username} ({identity.id})")

        response = RedirectResponse(url=state.config.frontend_url, status_code=302)
        state.carrier.issue(response, token)
        return response

    @router.get("/me", response_model=IdentityResponse)
    async def me(identity: ProviderIdentity = Depends(get_current_identity)):
        """Return the logged-in user's identity."""
        return IdentityResponse.from_identity(identity)

    @router.post("/logout", response_model=MessageResponse)
    async def logout(state: AppState = Depends(get_app_state)):
        """Clear the session cookie. Safe to call without a session."""
        response = JSONResponse(content={"message": "Logged out successfully"})
        state.carrier.clear(response)
        return response

    return router
