"""Test configuration and fixtures."""

import pytest

from linkfolio.auth.config import AppConfig
from linkfolio.store import JsonProfileStore
from tests.harness import FakeOAuthServer, make_client, make_config


@pytest.fixture
def upstream() -> FakeOAuthServer:
    return FakeOAuthServer()


@pytest.fixture
def config(tmp_path) -> AppConfig:
    return make_config(tmp_path)


@pytest.fixture
def store(config) -> JsonProfileStore:
    return JsonProfileStore(config.profiles_file)


@pytest.fixture
def client(config, upstream, store):
    with make_client(config, upstream, store) as client:
        yield client
