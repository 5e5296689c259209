"""Configuration and environment loading for CareVoice Gateway."""

import re
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str | int) -> int:
    """Parse a duration such as "24h", "30m" or "3600" into seconds.

    Args:
        value: Seconds as an int, or a string with an optional s/m/h/d suffix

    Returns:
        The duration in seconds

    Raises:
        ValueError: If the value is not a positive duration
    """
    if isinstance(value, int):
        seconds = value
    else:
        match = _DURATION_RE.match(value.lower())
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        seconds = int(match.group(1)) * _DURATION_UNITS[match.group(2)]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    node_env: str = "development"
    log_level: str = "INFO"

    # CareVoiceOS
    carevoice_api_base_url: str = "https://gravitee-gateway.kangyu.info/os3/api/open/v1"
    carevoice_api_key: str
    carevoice_client_id: str
    carevoice_client_secret: str
    carevoice_group: str
    carevoice_timeout: float = 30.0

    # Session tokens
    jwt_secret: str = "default-secret-key"
    jwt_expires_in: str = "24h"
    bcrypt_rounds: int = 10

    # Rate limiting
    rate_limit_window_ms: int = 900_000  # 15 minutes
    rate_limit_max_requests: int = 100

    # CORS (comma-separated)
    cors_origin: str = "http://localhost:3000,http://localhost:8081"

    # User storage
    user_store: Literal["memory", "supabase"] = "memory"
    supabase_url: str | None = None
    supabase_key: str | None = None

    @field_validator("jwt_expires_in")
    @classmethod
    def _check_expiry(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator("bcrypt_rounds")
    @classmethod
    def _check_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return value

    @property
    def debug(self) -> bool:
        return self.node_env.lower() == "development"

    @property
    def jwt_expires_seconds(self) -> int:
        return parse_duration(self.jwt_expires_in)

    @property
    def rate_limit_window_seconds(self) -> float:
        return self.rate_limit_window_ms / 1000

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
