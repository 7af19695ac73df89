"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Annotated, Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    env: Literal["development", "production", "testing"] = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(default="json", alias="LOG_FORMAT")


class FetchConfig(BaseSettings):
    """Outbound fetch limits for email sources and harvested links."""

    model_config = SettingsConfigDict(extra="ignore")

    link_timeout_seconds: float = Field(default=5.0, gt=0, alias="LINK_TIMEOUT_SECONDS")
    source_timeout_seconds: float = Field(default=30.0, gt=0, alias="SOURCE_TIMEOUT_SECONDS")
    max_source_size_mb: int = Field(default=25, ge=1, alias="MAX_SOURCE_SIZE_MB")
    max_link_response_mb: int = Field(default=10, ge=1, alias="MAX_LINK_RESPONSE_MB")
    user_agent: str = Field(default="email-json-extractor/1.0", alias="HTTP_USER_AGENT")
    follow_redirects: bool = Field(default=True, alias="FOLLOW_REDIRECTS")
    source_root: Optional[Path] = Field(default=None, alias="SOURCE_ROOT")

    @field_validator("source_root", mode="before")
    @classmethod
    def validate_path(cls, v: str | Path | None) -> Path | None:
        """Convert string to Path."""
        if v is None or v == "":
            return None
        return Path(v) if isinstance(v, str) else v

    @property
    def max_source_bytes(self) -> int:
        return self.max_source_size_mb * 1024 * 1024

    @property
    def max_link_response_bytes(self) -> int:
        return self.max_link_response_mb * 1024 * 1024


class ExtractionConfig(BaseSettings):
    """Extraction pipeline behavior."""

    model_config = SettingsConfigDict(extra="ignore")

    # When false, the first JSON-looking attachment decides the attachment
    # strategy even if it does not parse.
    attachment_fallthrough: bool = Field(default=False, alias="ATTACHMENT_FALLTHROUGH")


class AdminConfig(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    api_key: Optional[SecretStr] = Field(default=None, alias="ADMIN_API_KEY")
    port: int = Field(default=8080, alias="ADMIN_PORT")
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        alias="ADMIN_CORS_ORIGINS",
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def empty_key_disables_auth(cls, v: str | SecretStr | None) -> str | SecretStr | None:
        """Treat an empty ADMIN_API_KEY as unset."""
        if v == "":
            return None
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_origins(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class Settings(BaseSettings):
    """Master settings combining all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app: AppConfig = Field(default_factory=AppConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)


# Global settings instance
settings = Settings()
