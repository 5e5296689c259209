"""Custom exceptions for CareVoice Gateway.

Each exception carries the HTTP status it maps to; the handlers in
``carevoice_gateway.api.errors`` render them into the response envelope.
"""

from typing import Any


class CareVoiceGatewayError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(CareVoiceGatewayError):
    """Raised for bad credentials or a missing/invalid session token."""

    status_code = 401
    default_message = "Invalid credentials"


class UserExistsError(CareVoiceGatewayError):
    """Raised when registering an email that is already taken."""

    status_code = 400
    default_message = "User already exists"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__()


class UserNotFoundError(CareVoiceGatewayError):
    """Raised when a session token's subject has no stored user."""

    status_code = 404
    default_message = "User not found"


class UpstreamAuthError(CareVoiceGatewayError):
    """Raised when any step of the CareVoiceOS handshake failed.

    The upstream error payload is passed through untouched.
    """

    status_code = 400
    default_message = "CareVoiceOS authentication failed"

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__()


class RateLimitExceededError(CareVoiceGatewayError):
    """Raised when a client exceeds the request budget for the window."""

    status_code = 429
    default_message = "Too many requests, please try again later."

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__()
