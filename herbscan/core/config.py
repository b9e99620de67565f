"""
Core configuration management using Pydantic Settings.
Follows 12-factor app principles for environment-based configuration.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ANDROID_EMULATOR = "android-emulator"
DEFAULT_PLATFORM = "default"


class Settings(BaseSettings):
    """Client settings with environment variable support (prefix HERBSCAN_)."""

    model_config = SettingsConfigDict(
        env_prefix="HERBSCAN_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "herbscan"
    version: str = "1.0.0"
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    # Lookup service
    api_base_url: Optional[str] = Field(default=None)
    platform: str = Field(default=DEFAULT_PLATFORM)
    # The Android emulator reaches the host loopback through 10.0.2.2
    android_emulator_base_url: str = Field(default="http://10.0.2.2:3000")
    default_base_url: str = Field(default="http://127.0.0.1:3000")
    request_timeout: float = Field(default=10.0, gt=0)
    auth_token: Optional[str] = Field(default=None)

    # Camera
    camera_index: int = Field(default=0, ge=0)
    frame_interval: float = Field(default=0.05, ge=0)
    debounce_seconds: float = Field(default=1.0, ge=0)

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, v: str) -> str:
        """Validate deployment platform values."""
        allowed = [ANDROID_EMULATOR, DEFAULT_PLATFORM]
        v = v.strip().lower()
        if v not in allowed:
            raise ValueError(f"Platform must be one of {allowed}")
        return v

    @field_validator("api_base_url", "auth_token", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty environment values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def resolve_base_url(self) -> str:
        """
        Resolve the lookup service base URL.

        Precedence: explicit override > platform-specific default.
        """
        if self.api_base_url:
            base = self.api_base_url
        elif self.platform == ANDROID_EMULATOR:
            base = self.android_emulator_base_url
        else:
            base = self.default_base_url
        return base.strip().rstrip("/")


def get_settings(**overrides) -> Settings:
    """Factory function to build settings, with explicit values taking precedence over the environment."""
    values = {k: v for k, v in overrides.items() if v is not None}
    return Settings(**values)
