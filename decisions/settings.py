"""
Application settings loaded from environment variables (and an optional .env file).

Use get_settings() as a FastAPI dependency; tests can build Settings(...) directly
and hand it to create_app().
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development", description="development, staging or production")
    log_level: str = Field(default="INFO", description="Root log level")

    jwt_secret: str = Field(
        default="dev-only-secret-change-me-in-production",
        description="HMAC secret used to verify session tokens",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expiry_hours: int = Field(default=24, ge=1)
    auth_cookie_name: str = Field(default="token", description="Cookie carrying the session token")

    allowed_origins: str = Field(default="*", description="Comma-separated CORS origins")

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
