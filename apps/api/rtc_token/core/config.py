"""Application configuration for the token service."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..services.access_token import DEFAULT_TTL_SECONDS, Credential
from .errors import ConfigurationError


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    agora_app_id: str = Field(default="")
    agora_app_certificate: SecretStr = Field(default=SecretStr(""))
    token_default_ttl_seconds: int = Field(default=DEFAULT_TTL_SECONDS)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for CORS origins."""

        if isinstance(value, str):
            parts = [item.strip() for item in value.split(",") if item.strip()]
            return parts
        return value

    def credential(self) -> Credential:
        """Return the signing credential, failing loudly when either secret is missing."""

        app_id = self.agora_app_id
        certificate = self.agora_app_certificate.get_secret_value()
        if not app_id.strip() or not certificate.strip():
            raise ConfigurationError("AGORA_APP_ID and AGORA_APP_CERTIFICATE must both be set")
        return Credential(app_id=app_id, app_certificate=certificate)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
