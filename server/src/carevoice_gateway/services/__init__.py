"""Services for CareVoice Gateway."""

from carevoice_gateway.services.authenticator import CareVoiceAuthenticator, UpstreamClient
from carevoice_gateway.services.carevoice_client import CareVoiceClient
from carevoice_gateway.services.identity import IdentityService
from carevoice_gateway.services.session_tokens import SessionTokenService

__all__ = [
    "CareVoiceAuthenticator",
    "CareVoiceClient",
    "IdentityService",
    "SessionTokenService",
    "UpstreamClient",
]
