"""CareVoice Gateway - local identity bridged to CareVoiceOS SDK tokens."""

__version__ = "1.0.0"

from carevoice_gateway.exceptions import CareVoiceGatewayError

__all__ = ["__version__", "CareVoiceGatewayError"]
