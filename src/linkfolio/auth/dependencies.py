"""Request dependencies for linkfolio.

Everything a route needs is built once in create_app() and kept on
app.state; these dependencies hand it to routes and resolve the caller's
session.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request

from ..errors import ApiError
from ..store import ProfileStore
from .config import AppConfig
from .providers import Providers
from .providers.base import IdentityFetchError, InvalidTokenError, ProviderIdentity
from .session import SessionCarrier

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Collaborators shared by every request."""

    config: AppConfig
    providers: Providers
    store: ProfileStore
    carrier: SessionCarrier


def get_app_state(request: Request) -> AppState:
    return request.app.state.linkfolio


def get_session_token(
    request: Request,
    state: AppState = Depends(get_app_state),
) -> str:
    """
    Dependency returning the caller's bearer token.

    Raises 401 if there is no session cookie. A cookie that fails signature
    verification is cleared.
    """
    try:
        token = state.carrier.read(request)
    except InvalidTokenError:
        raise ApiError(401, "Invalid or expired token", clear_session=True)

    if not token:
        raise ApiError(401, "Not authenticated")
    return token


async def get_current_identity(
    token: str = Depends(get_session_token),
    state: AppState = Depends(get_app_state),
) -> ProviderIdentity:
    """
    Dependency resolving the session token to the caller's Discord identity.

    The provider is asked on every request; a token it rejects is cleared
    so the browser stops presenting it.
    """
    try:
        return await state.providers.primary.get_user_info(token)
    except InvalidTokenError:
        logger.info("Session token rejected by provider; clearing cookie")
        raise ApiError(401, "Invalid or expired token", clear_session=True)
    except IdentityFetchError as e:
        raise ApiError(upstream_status(e), "Failed to fetch user data")


def upstream_status(error: IdentityFetchError) -> int:
    """Pass an upstream error status through; anything else is a 500."""
    if error.status_code and error.status_code >= 400:
        return error.status_code
    return 500
