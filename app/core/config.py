"""
Application Configuration

Uses Pydantic Settings for environment variable management with validation.
"""

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class OtpPolicy:
    """
    OTP lifecycle limits.

    Passed into the lifecycle manager at construction so that tests can
    exercise boundary values (e.g. a ceiling of 1) directly.
    """
    code_length: int = 6
    ttl: timedelta = timedelta(minutes=5)
    max_verify_attempts: int = 5


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str
    DATABASE_SSL: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720  # 12 hours
    JWT_ISSUER: str = "ilocks-qr-api"
    JWT_AUDIENCE: str = "ilocks-qr-clients"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # OTP
    OTP_CODE_LENGTH: int = 6
    OTP_EXPIRE_MINUTES: int = 5
    OTP_MAX_VERIFY_ATTEMPTS: int = 5
    OTP_REQUEST_RATE_PER_MINUTE: int = 5
    OTP_REQUEST_BURST: int = 3

    # Rate limiting
    RATE_LIMIT_TRUST_FORWARDED_FOR: bool = False  # only behind a proxy that sets it
    RATE_LIMIT_MAX_CLIENTS: int = 10000

    # Telegram
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_API_BASE_URL: str = "https://api.telegram.org"
    TELEGRAM_TIMEOUT_SECONDS: float = 15.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @field_validator("SECRET_KEY")
    @classmethod
    def secret_key_length(cls, value: str) -> str:
        if len(value) < 32:
            raise ValueError("SECRET_KEY must contain at least 32 characters")
        return value

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def otp_policy(self) -> OtpPolicy:
        return OtpPolicy(
            code_length=self.OTP_CODE_LENGTH,
            ttl=timedelta(minutes=self.OTP_EXPIRE_MINUTES),
            max_verify_attempts=self.OTP_MAX_VERIFY_ATTEMPTS,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are only loaded once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
