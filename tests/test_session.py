"""Tests for the session cookie carrier."""

import pytest
from fastapi import Request, Response

from linkfolio.auth.providers import InvalidTokenError
from linkfolio.auth.session import SESSION_COOKIE, SessionCarrier


def request_with_cookie(value: str | None) -> Request:
    headers = []
    if value is not None:
        headers.append((b"cookie", f"{SESSION_COOKIE}={value}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def set_cookie_header(response: Response) -> str:
    return response.headers["set-cookie"]


class TestIssue:
    def test_sets_http_only_lax_cookie_for_seven_days(self):
        response = Response()

        SessionCarrier().issue(response, "tok")

        header = set_cookie_header(response)
        assert header.startswith(f"{SESSION_COOKIE}=tok")
        assert "HttpOnly" in header
        assert "SameSite=lax" in header
        assert "Max-Age=604800" in header
        assert "Path=/" in header
        assert "Secure" not in header

    def test_secure_flag_follows_configuration(self):
        response = Response()

        SessionCarrier(secure=True).issue(response, "tok")

        assert "Secure" in set_cookie_header(response)


class TestRead:
    def test_returns_raw_token(self):
        assert SessionCarrier().read(request_with_cookie("tok")) == "tok"

    def test_absent_cookie_returns_none(self):
        assert SessionCarrier().read(request_with_cookie(None)) is None

    def test_signed_cookie_round_trips(self):
        carrier = SessionCarrier(secret="s3cret")
        response = Response()
        carrier.issue(response, "tok")
        value = set_cookie_header(response).split(";")[0].split("=", 1)[1]

        assert value != "tok"
        assert carrier.read(request_with_cookie(value)) == "tok"

    def test_tampered_signed_cookie_raises_invalid_token(self):
        carrier = SessionCarrier(secret="s3cret")

        with pytest.raises(InvalidTokenError):
            carrier.read(request_with_cookie("forged-token"))

    def test_cookie_signed_with_other_secret_is_rejected(self):
        response = Response()
        SessionCarrier(secret="one").issue(response, "tok")
        value = set_cookie_header(response).split(";")[0].split("=", 1)[1]

        with pytest.raises(InvalidTokenError):
            SessionCarrier(secret="two").read(request_with_cookie(value))


def test_clear_expires_cookie():
    response = Response()

    SessionCarrier().clear(response)

    header = set_cookie_header(response)
    assert header.startswith(f"{SESSION_COOKIE}=")
    assert "Max-Age=0" in header
