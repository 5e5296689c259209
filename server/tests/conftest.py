"""Global test configuration for CareVoice Gateway."""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from carevoice_gateway.config import Settings
from carevoice_gateway.db.repository import InMemoryUserRepository
from carevoice_gateway.models.upstream import UpstreamResult
from carevoice_gateway.services.carevoice_client import CareVoiceClient

SERVER_TOKEN = "server-token-abc"
ACCOUNT_ID = "acct-123"
USER_TOKEN = "user-token-xyz"
REFRESH_TOKEN = "refresh-token-xyz"


@pytest.fixture(autouse=True, scope="session")
def _set_test_env_vars():
    """Set dummy environment variables for Settings validation.

    This ensures tests don't require a real .env file or exported env vars.
    Only sets values that aren't already present, so real env vars take
    precedence (useful for integration tests).
    """
    defaults = {
        "CAREVOICE_API_KEY": "test-api-key",
        "CAREVOICE_CLIENT_ID": "test-client-id",
        "CAREVOICE_CLIENT_SECRET": "test-client-secret",
        "CAREVOICE_GROUP": "test-group",
    }
    originals = {}
    for key, value in defaults.items():
        if key not in os.environ:
            os.environ[key] = value
            originals[key] = None
        else:
            originals[key] = os.environ[key]

    # Clear the lru_cache on get_settings so it picks up the new env vars
    from carevoice_gateway.config import get_settings
    get_settings.cache_clear()

    yield

    # Restore original env state
    for key, original in originals.items():
        if original is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings with fast bcrypt and fixed credentials."""
    return Settings(
        _env_file=None,
        carevoice_api_base_url="https://carevoice.test/api/open/v1",
        carevoice_api_key="test-api-key",
        carevoice_client_id="test-client-id",
        carevoice_client_secret="test-client-secret",
        carevoice_group="test-group",
        jwt_secret="test-jwt-secret",
        jwt_expires_in="1h",
        bcrypt_rounds=4,
        node_env="test",
    )


@pytest.fixture
def upstream() -> MagicMock:
    """Stub CareVoiceOS client whose three calls all succeed."""
    client = MagicMock(spec=CareVoiceClient)
    client.fetch_server_token = AsyncMock(
        return_value=UpstreamResult.ok({"access_token": SERVER_TOKEN, "expires_in": 7200})
    )
    client.provision_account = AsyncMock(
        return_value=UpstreamResult.ok({"uid": ACCOUNT_ID})
    )
    client.fetch_user_token = AsyncMock(
        return_value=UpstreamResult.ok({
            "access_token": USER_TOKEN,
            "refresh_token": REFRESH_TOKEN,
            "expires_in": 3600,
        })
    )
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def app(settings, upstream, repository):
    from carevoice_gateway.main import create_app

    return create_app(settings, carevoice_client=upstream, repository=repository)


@pytest.fixture
def api(app) -> TestClient:
    return TestClient(app)
