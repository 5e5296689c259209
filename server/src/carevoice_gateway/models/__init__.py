"""Pydantic models for CareVoice Gateway - the contracts."""

from carevoice_gateway.models.auth import (
    ApiResponse,
    CareVoiceAuthData,
    CareVoiceAuthRequest,
    LoginData,
    LoginRequest,
    RegisterData,
    RegisterRequest,
    SessionClaims,
)
from carevoice_gateway.models.identity import User, UserProfile, UserPublic
from carevoice_gateway.models.upstream import (
    AuthResult,
    AuthStep,
    SdkSession,
    SdkTokens,
    UpstreamResult,
)

__all__ = [
    "ApiResponse",
    "AuthResult",
    "AuthStep",
    "CareVoiceAuthData",
    "CareVoiceAuthRequest",
    "LoginData",
    "LoginRequest",
    "RegisterData",
    "RegisterRequest",
    "SdkSession",
    "SdkTokens",
    "SessionClaims",
    "UpstreamResult",
    "User",
    "UserProfile",
    "UserPublic",
]
