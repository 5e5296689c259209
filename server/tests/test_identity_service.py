"""Tests for IdentityService."""

import re

import pytest

from carevoice_gateway.db.repository import InMemoryUserRepository
from carevoice_gateway.exceptions import (
    AuthenticationError,
    UpstreamAuthError,
    UserExistsError,
    UserNotFoundError,
)
from carevoice_gateway.models.auth import SessionClaims
from carevoice_gateway.models.upstream import UpstreamResult
from carevoice_gateway.services.authenticator import CareVoiceAuthenticator
from carevoice_gateway.services.identity import IdentityService, generate_udid
from carevoice_gateway.services.session_tokens import SessionTokenService

from conftest import ACCOUNT_ID, USER_TOKEN

UDID_RE = re.compile(r"^udid_\d+_[0-9a-z]{9}$")


@pytest.fixture
def service(upstream) -> IdentityService:
    return IdentityService(
        repository=InMemoryUserRepository(),
        authenticator=CareVoiceAuthenticator(upstream),
        tokens=SessionTokenService("test-jwt-secret", 3600),
        bcrypt_rounds=4,
    )


class TestGenerateUdid:
    """Tests for generate_udid."""

    def test_format(self):
        assert UDID_RE.match(generate_udid())

    def test_unique(self):
        assert len({generate_udid() for _ in range(50)}) == 50


class TestRegister:
    """Tests for IdentityService.register()."""

    @pytest.mark.asyncio
    async def test_creates_user(self, service, upstream):
        result = await service.register("a@x.com", "secret1")

        assert result.user.email == "a@x.com"
        assert result.user.name == "a"
        claims = service.tokens.verify(result.token)
        assert claims.user_id == result.user.id
        assert claims.email == "a@x.com"
        assert claims.account_id is None

        stored = await service.repository.get("a@x.com")
        assert UDID_RE.match(stored.udid)
        assert stored.password_hash != "secret1"
        assert upstream.fetch_server_token.await_count == 0

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service):
        await service.register("a@x.com", "secret1")

        with pytest.raises(UserExistsError):
            await service.register("a@x.com", "another1")


class TestLogin:
    """Tests for IdentityService.login()."""

    @pytest.mark.asyncio
    async def test_success(self, service, upstream):
        registered = await service.register("a@x.com", "secret1")

        result = await service.login("a@x.com", "secret1")

        assert result.user.id == registered.user.id
        assert result.sdk.access_token == USER_TOKEN
        claims = service.tokens.verify(result.token)
        assert claims.account_id == ACCOUNT_ID
        assert claims.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_udid_stable_across_logins(self, service, upstream):
        await service.register("a@x.com", "secret1")
        stored = await service.repository.get("a@x.com")

        await service.login("a@x.com", "secret1")
        await service.login("a@x.com", "secret1")

        unique_ids = [call.args[1] for call in upstream.provision_account.await_args_list]
        assert unique_ids == [stored.udid, stored.udid]

    @pytest.mark.asyncio
    async def test_unknown_email(self, service, upstream):
        with pytest.raises(AuthenticationError) as exc_info:
            await service.login("nobody@x.com", "secret1")

        assert exc_info.value.message == "Invalid credentials"
        assert upstream.fetch_server_token.await_count == 0

    @pytest.mark.asyncio
    async def test_wrong_password(self, service, upstream):
        await service.register("a@x.com", "secret1")

        with pytest.raises(AuthenticationError) as exc_info:
            await service.login("a@x.com", "wrong-password")

        assert exc_info.value.message == "Invalid credentials"
        assert upstream.fetch_server_token.await_count == 0

    @pytest.mark.asyncio
    async def test_upstream_failure(self, service, upstream):
        upstream.provision_account.return_value = UpstreamResult.fail({"message": "group unknown"})
        await service.register("a@x.com", "secret1")

        with pytest.raises(UpstreamAuthError) as exc_info:
            await service.login("a@x.com", "secret1")

        assert exc_info.value.error == {"message": "group unknown"}


class TestAuthenticateUniqueId:
    """Tests for IdentityService.authenticate_unique_id()."""

    @pytest.mark.asyncio
    async def test_success(self, service, upstream):
        result = await service.authenticate_unique_id("device-42")

        assert result.account_id == ACCOUNT_ID
        assert result.sdk.access_token == USER_TOKEN
        claims = service.tokens.verify(result.token)
        assert claims.unique_id == "device-42"
        assert claims.user_id is None
        upstream.provision_account.assert_awaited_once()
        assert upstream.provision_account.await_args.args[1] == "device-42"
        assert len(service.repository) == 0

    @pytest.mark.asyncio
    async def test_failure(self, service, upstream):
        upstream.fetch_server_token.return_value = UpstreamResult.fail("Timeout after 30000ms")

        with pytest.raises(UpstreamAuthError) as exc_info:
            await service.authenticate_unique_id("device-42")

        assert exc_info.value.error == "Timeout after 30000ms"


class TestProfile:
    """Tests for IdentityService.profile()."""

    @pytest.mark.asyncio
    async def test_found(self, service):
        registered = await service.register("a@x.com", "secret1")

        user = await service.profile(SessionClaims(user_id=registered.user.id, email="a@x.com"))

        assert user.id == registered.user.id

    @pytest.mark.asyncio
    async def test_missing_user(self, service):
        with pytest.raises(UserNotFoundError):
            await service.profile(SessionClaims(user_id="u1", email="gone@x.com"))

    @pytest.mark.asyncio
    async def test_claims_without_email(self, service):
        with pytest.raises(UserNotFoundError):
            await service.profile(SessionClaims(unique_id="device-42", account_id=ACCOUNT_ID))
