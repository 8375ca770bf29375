"""End-to-end tests for the Discord login endpoints."""

from urllib.parse import parse_qs, urlparse

from linkfolio.auth.session import SESSION_COOKIE
from tests.harness import DISCORD_USER, FRONTEND_URL, assert_cookie_cleared, login


def test_login_redirects_to_discord(client):
    response = client.get("/api/discord/login", follow_redirects=False)

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.netloc == "discord.com"
    params = parse_qs(location.query)
    assert params["response_type"] == ["code"]
    assert params["scope"] == ["identify"]


class TestCallback:
    def test_success_sets_cookie_and_redirects_to_frontend(self, client, upstream):
        response = login(client, upstream)

        assert response.headers["location"] == FRONTEND_URL
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{SESSION_COOKIE}=discord-token")
        assert "HttpOnly" in set_cookie
        assert client.cookies.get(SESSION_COOKIE) == "discord-token"

    def test_missing_code_is_400_without_cookie(self, client, upstream):
        response = client.get("/api/discord/callback", follow_redirects=False)

        assert response.status_code == 400
        assert "error" in response.json()
        assert "set-cookie" not in response.headers
        assert upstream.requests == []

    def test_provider_denial_is_reported(self, client):
        response = client.get(
            "/api/discord/callback",
            params={"error": "access_denied", "error_description": "The user denied access"},
            follow_redirects=False,
        )

        assert response.status_code == 400
        assert response.json() == {"error": "The user denied access"}

    def test_rejected_code_is_400(self, client, upstream):
        response = client.get(
            "/api/discord/callback", params={"code": "unknown"}, follow_redirects=False
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Failed to exchange code for token"}
        assert "set-cookie" not in response.headers

    def test_identity_rejecting_fresh_token_is_401(self, client, upstream):
        upstream.codes[("discord", "code")] = "token-without-user"

        response = client.get(
            "/api/discord/callback", params={"code": "code"}, follow_redirects=False
        )

        assert response.status_code == 401
        assert "set-cookie" not in response.headers

    def test_identity_outage_is_500(self, client, upstream):
        upstream.add_user("discord", "code", "tok", DISCORD_USER)
        upstream.user_status["discord"] = 503

        response = client.get(
            "/api/discord/callback", params={"code": "code"}, follow_redirects=False
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch user data"}


class TestMe:
    def test_returns_identity_field_for_field(self, client, upstream):
        login(client, upstream)

        response = client.get("/api/discord/me")

        assert response.status_code == 200
        assert response.json() == {
            "id": "123",
            "username": "alice",
            "global_name": "Alice",
            "avatar": None,
            "avatar_url": None,
        }

    def test_avatar_url_derived_from_hash(self, client, upstream):
        login(client, upstream, user={**DISCORD_USER, "avatar": "a1b2"})

        response = client.get("/api/discord/me")

        assert response.json()["avatar_url"] == "https://cdn.discordapp.com/avatars/123/a1b2.png"

    def test_without_cookie_is_401_and_clears_nothing(self, client):
        response = client.get("/api/discord/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}
        assert "set-cookie" not in response.headers

    def test_invalid_token_is_401_and_clears_cookie(self, client, upstream):
        login(client, upstream)
        upstream.revoke("discord", "discord-token")

        response = client.get("/api/discord/me")

        assert response.status_code == 401
        assert_cookie_cleared(response)
        assert client.cookies.get(SESSION_COOKIE) is None

        follow_up = client.get("/api/discord/me")
        assert follow_up.json() == {"error": "Not authenticated"}

    def test_upstream_error_status_is_passed_through(self, client, upstream):
        login(client, upstream)
        upstream.user_status["discord"] = 429

        response = client.get("/api/discord/me")

        assert response.status_code == 429
        assert "set-cookie" not in response.headers


class TestLogout:
    def test_logout_twice_is_idempotent(self, client, upstream):
        login(client, upstream)

        first = client.post("/api/discord/logout")
        second = client.post("/api/discord/logout")

        for response in (first, second):
            assert response.status_code == 200
            assert response.json() == {"message": "Logged out successfully"}
            assert_cookie_cleared(response)
        assert client.cookies.get(SESSION_COOKIE) is None

    def test_logout_without_session(self, client):
        response = client.post("/api/discord/logout")

        assert response.status_code == 200


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
