"""Tests for configuration loading."""

import pytest

from linkfolio.auth.config import ConfigError, load_config
from linkfolio.main import main

ENV_VARS = [
    "DISCORD_CLIENT_ID",
    "DISCORD_CLIENT_SECRET",
    "DISCORD_CLIENT_SECRET_FILE",
    "DISCORD_REDIRECT_URI",
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "GITHUB_CLIENT_SECRET_FILE",
    "GITHUB_REDIRECT_URI",
    "FRONTEND_URL",
    "SETTINGS_URL",
    "COOKIE_SECURE",
    "SESSION_SECRET",
    "SESSION_SECRET_FILE",
    "PROFILES_FILE",
    "HTTP_TIMEOUT",
    "HOST",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def discord_env(monkeypatch):
    monkeypatch.setenv("DISCORD_CLIENT_ID", "discord-client")
    monkeypatch.setenv("DISCORD_CLIENT_SECRET", "discord-secret")
    monkeypatch.setenv("DISCORD_REDIRECT_URI", "http://localhost:3001/api/discord/callback")


def test_missing_discord_credentials_is_fatal():
    with pytest.raises(ConfigError, match="DISCORD_CLIENT_ID"):
        load_config()


def test_defaults(discord_env):
    config = load_config()

    assert config.primary.name == "discord"
    assert config.primary.scope == "identify"
    assert config.secondary is None
    assert config.linking_enabled is False
    assert config.frontend_url == "http://localhost:8080"
    assert config.settings_url == "http://localhost:8080/settings"
    assert config.cookie_secure is False
    assert config.session_secret == ""
    assert config.port == 3001


def test_github_enabled_when_fully_configured(discord_env, monkeypatch):
    monkeypatch.setenv("GITHUB_CLIENT_ID", "gh")
    monkeypatch.setenv("GITHUB_CLIENT_SECRET", "gh-secret")
    monkeypatch.setenv("GITHUB_REDIRECT_URI", "http://localhost:3001/api/github/callback")

    config = load_config()

    assert config.linking_enabled is True
    assert config.secondary.scope == "read:user"
    assert config.secondary.token_url == "https://github.com/login/oauth/access_token"


def test_partial_github_credentials_disable_linking(discord_env, monkeypatch):
    monkeypatch.setenv("GITHUB_CLIENT_ID", "gh")

    assert load_config().linking_enabled is False


def test_secret_read_from_file(discord_env, monkeypatch, tmp_path):
    monkeypatch.delenv("DISCORD_CLIENT_SECRET")
    secret_file = tmp_path / "discord_secret"
    secret_file.write_text("from-file\n")
    monkeypatch.setenv("DISCORD_CLIENT_SECRET_FILE", str(secret_file))

    assert load_config().primary.client_secret == "from-file"


def test_frontend_and_cookie_settings(discord_env, monkeypatch):
    monkeypatch.setenv("FRONTEND_URL", "https://me.example/")
    monkeypatch.setenv("COOKIE_SECURE", "true")

    config = load_config()

    assert config.frontend_url == "https://me.example"
    assert config.settings_url == "https://me.example/settings"
    assert config.cookie_secure is True


def test_invalid_port_is_config_error(discord_env, monkeypatch):
    monkeypatch.setenv("PORT", "not-a-port")

    with pytest.raises(ConfigError):
        load_config()


def test_main_refuses_to_start_without_discord_credentials():
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 1
