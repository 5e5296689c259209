"""Local registration and login, bridged to the CareVoiceOS handshake."""

import asyncio
import logging
import secrets
import string
import time

from carevoice_gateway.db.repository import UserRepository
from carevoice_gateway.exceptions import (
    AuthenticationError,
    UpstreamAuthError,
    UserExistsError,
    UserNotFoundError,
)
from carevoice_gateway.models.auth import CareVoiceAuthData, LoginData, RegisterData, SessionClaims
from carevoice_gateway.models.identity import User
from carevoice_gateway.models.upstream import SdkSession
from carevoice_gateway.services.authenticator import CareVoiceAuthenticator
from carevoice_gateway.services.passwords import DEFAULT_ROUNDS, hash_password, verify_password
from carevoice_gateway.services.session_tokens import SessionTokenService

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def generate_udid() -> str:
    """Build a unique device identifier from the current time plus randomness.

    Format: ``udid_<epoch milliseconds>_<9 base36 characters>``.
    """
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"udid_{int(time.time() * 1000)}_{suffix}"


class IdentityService:
    """Owns the local user lifecycle and composes it with upstream auth."""

    def __init__(
        self,
        repository: UserRepository,
        authenticator: CareVoiceAuthenticator,
        tokens: SessionTokenService,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        self.repository = repository
        self.authenticator = authenticator
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds

    async def register(self, email: str, password: str) -> RegisterData:
        """Create a local user and issue a session token.

        Raises:
            UserExistsError: If the email is already registered
        """
        if await self.repository.exists(email):
            raise UserExistsError(email)

        password_hash = await asyncio.to_thread(hash_password, password, self.bcrypt_rounds)
        user = User(
            email=email,
            password_hash=password_hash,
            name=email.split("@")[0],
            udid=generate_udid(),
        )
        # Insert-if-absent: a concurrent registration of the same email fails here.
        await self.repository.put(user)
        logger.info(f"Registered user {user.id} ({email}) with udid={user.udid}")

        token = self.tokens.issue(SessionClaims(user_id=user.id, email=user.email))
        return RegisterData(user=user.public(), token=token)

    async def login(self, email: str, password: str) -> LoginData:
        """Verify local credentials, then run the CareVoiceOS handshake.

        A session token is only issued when both succeed.

        Raises:
            AuthenticationError: Unknown email or wrong password
            UpstreamAuthError: Any handshake step failed
        """
        user = await self.repository.get(email)
        if user is None:
            logger.info(f"Login rejected for unknown email {email}")
            raise AuthenticationError("Invalid credentials")

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.info(f"Login rejected for {email}: bad password")
            raise AuthenticationError("Invalid credentials")

        logger.info(f"Login for {email}: authenticating with CareVoiceOS (udid={user.udid})")
        session = await self._authenticate(user.udid)

        token = self.tokens.issue(
            SessionClaims(user_id=user.id, email=user.email, account_id=session.account_id)
        )
        return LoginData(user=user.public(), token=token, sdk=session.sdk_tokens())

    async def authenticate_unique_id(self, unique_id: str) -> CareVoiceAuthData:
        """Run the handshake for a caller-supplied identifier, bypassing local users.

        Raises:
            UpstreamAuthError: Any handshake step failed
        """
        session = await self._authenticate(unique_id)
        token = self.tokens.issue(SessionClaims(unique_id=unique_id, account_id=session.account_id))
        return CareVoiceAuthData(sdk=session.sdk_tokens(), token=token, account_id=session.account_id)

    async def profile(self, claims: SessionClaims) -> User:
        """Return the stored user a session token refers to.

        Raises:
            UserNotFoundError: If the token carries no email or the user is absent
        """
        user = await self.repository.get(claims.email) if claims.email else None
        if user is None:
            raise UserNotFoundError()
        return user

    async def _authenticate(self, unique_id: str) -> SdkSession:
        result = await self.authenticator.authenticate(unique_id)
        if not result.success or result.session is None:
            raise UpstreamAuthError(result.error)
        return result.session
