"""
Configuration management for MediClear.

Uses Pydantic Settings for type-safe environment variable handling.
All configuration is loaded from environment variables or .env file.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ==========================================================================
    # Application
    # ==========================================================================
    app_name: str = "MediClear"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    # Log keys whose values are replaced before rendering
    log_redacted_fields: str = (
        "text,image,report,summary,key_points,keyPoints,glossary,"
        "disclaimer,payload,prompt,content"
    )

    # ==========================================================================
    # Server
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 8000

    # ==========================================================================
    # LLM Configuration
    # ==========================================================================
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("gemini_api_key", "api_key")
    )
    gemini_model: str = "gemini-2.5-flash"

    # ==========================================================================
    # Languages
    # ==========================================================================
    base_language: str = "English"
    supported_languages: str = "English,Hindi,Kannada,Tamil"
    translation_cache_enabled: bool = False

    # ==========================================================================
    # Rate Limiting
    # ==========================================================================
    rate_limit_enabled: bool = True
    rate_limit_per_minute: int = 30

    # ==========================================================================
    # Input Limits
    # ==========================================================================
    max_image_size_mb: int = 10
    allowed_image_extensions: str = ".png,.jpg,.jpeg,.webp"
    max_text_length: int = 50000

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def max_image_size_bytes(self) -> int:
        """Maximum uploaded image size in bytes."""
        return self.max_image_size_mb * 1024 * 1024

    @property
    def image_extensions(self) -> list[str]:
        """List of allowed image extensions."""
        return [ext.strip() for ext in self.allowed_image_extensions.split(",")]

    @property
    def redacted_log_fields(self) -> frozenset[str]:
        """Log keys that may carry report content."""
        return frozenset(
            key.strip() for key in self.log_redacted_fields.split(",") if key.strip()
        )

    @property
    def languages(self) -> list[str]:
        """Selectable report languages, base language first."""
        langs = [lang.strip() for lang in self.supported_languages.split(",") if lang.strip()]
        if self.base_language not in langs:
            langs.insert(0, self.base_language)
        return langs


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience access
settings = get_settings()
