"""Session cookie handling for linkfolio.

The session is the primary provider's bearer token carried in an httpOnly
cookie. There is no server-side session table: a request is authenticated
exactly when the provider still accepts the token.
"""

import logging

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeTimedSerializer

from .config import SESSION_MAX_AGE, AppConfig
from .providers.base import InvalidTokenError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"


class SessionCarrier:
    """Issue, read and clear the session cookie.

    Without a secret the cookie value is the raw bearer token. With one,
    the token is wrapped in a timed itsdangerous signature.
    """

    def __init__(
        self,
        secure: bool = False,
        secret: str = "",
        max_age: int = SESSION_MAX_AGE,
        cookie_name: str = SESSION_COOKIE,
    ):
        self.secure = secure
        self.max_age = max_age
        self.cookie_name = cookie_name
        self._serializer = (
            URLSafeTimedSerializer(secret, salt="session-token") if secret else None
        )

    @classmethod
    def from_config(cls, config: AppConfig) -> "SessionCarrier":
        return cls(secure=config.cookie_secure, secret=config.session_secret)

    def issue(self, response: Response, token: str) -> None:
        """Attach the token to the response as the session cookie."""
        value = self._serializer.dumps(token) if self._serializer else token
        response.set_cookie(
            key=self.cookie_name,
            value=value,
            max_age=self.max_age,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

    def read(self, request: Request) -> str | None:
        """
        Return the bearer token from the request, or None if there is no cookie.

        Raises:
            InvalidTokenError: If the cookie is signed but fails verification
        """
        value = request.cookies.get(self.cookie_name)
        if not value:
            return None

        if self._serializer is None:
            return value

        try:
            return self._serializer.loads(value, max_age=self.max_age)
        except BadSignature as e:
            logger.warning(f"Rejected session cookie: {e.__class__.__name__}")
            raise InvalidTokenError("Session cookie failed verification") from e

    def clear(self, response: Response) -> None:
        """Remove the session cookie."""
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )
