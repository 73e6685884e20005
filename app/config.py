# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Integrations (Twilio, Discord, Unsplash, Brave) are optional. Code that
# needs them checks the matching `*_configured` property and degrades
# instead of failing at startup.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # OpenAI / LLM Configuration
    # -------------------------------------------------------------------------

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for content generation and transcription"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4-turbo",
        description="Chat model used for blog and lab drafting"
    )

    OPENAI_TRANSCRIPTION_MODEL: str = Field(
        default="whisper-1",
        description="Speech-to-text model used for voicemail transcription"
    )

    # -------------------------------------------------------------------------
    # Integration API Keys
    # -------------------------------------------------------------------------

    JARVIS_API_KEY: str = Field(
        default="",
        description="Bearer key for the Jarvis desktop integration API"
    )

    CRON_SECRET: str = Field(
        default="",
        description="Bearer secret expected on scheduled job endpoints"
    )

    UNSPLASH_ACCESS_KEY: str = Field(
        default="",
        description="Unsplash API access key for header images"
    )

    BRAVE_API_KEY: str = Field(
        default="",
        description="Brave Search subscription token for topic research"
    )

    GITHUB_TOKEN: str = Field(
        default="",
        description="Optional GitHub token (raises API rate limits for lab generation)"
    )

    # -------------------------------------------------------------------------
    # Twilio Configuration
    # -------------------------------------------------------------------------

    TWILIO_ACCOUNT_SID: str = Field(default="", description="Twilio account SID")
    TWILIO_AUTH_TOKEN: str = Field(default="", description="Twilio auth token")
    TWILIO_API_KEY_SID: str = Field(
        default="",
        description="Optional Twilio API key SID (preferred for recording downloads)"
    )
    TWILIO_API_KEY_SECRET: str = Field(default="", description="Secret for TWILIO_API_KEY_SID")
    TWILIO_PHONE_NUMBER: str = Field(default="", description="Number SMS replies are sent from")

    TWILIO_VALIDATE_SIGNATURE: bool = Field(
        default=False,
        description="Reject webhook calls without a valid X-Twilio-Signature"
    )

    ADMIN_PHONE_NUMBER: str = Field(
        default="",
        description="Phone number that receives new SMS/voicemail alerts"
    )

    AUTO_TRANSCRIBE_VOICEMAILS: bool = Field(
        default=False,
        description="Queue a Whisper transcription when a voicemail recording completes"
    )

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    DISCORD_WEBHOOK_URL: str = Field(default="", description="Discord incoming webhook URL")

    DISCORD_WEBHOOK_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for Discord webhook calls"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(default="0.0.0.0", description="Host to bind the API server to")

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    PUBLIC_BASE_URL: str = Field(
        default="",
        description="Externally reachable base URL of this API (used in Twilio callbacks)"
    )

    SITE_URL: str = Field(
        default="https://novique.ai",
        description="Public website URL used in admin links"
    )

    ADMIN_AUTHOR_EMAIL: str = Field(
        default="admin@novique.ai",
        description="Profile email used as author for scheduled AI posts"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Image Upload Settings
    # -------------------------------------------------------------------------

    MAX_IMAGE_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum image upload size in MB"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://novique.ai" -> ["http://localhost:3000", "https://novique.ai"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_image_size_bytes(self) -> int:
        """Convert MB to bytes for upload validation."""
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024

    @property
    def twilio_configured(self) -> bool:
        """True when REST calls to Twilio can be authenticated."""
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN)

    @property
    def twilio_media_credentials(self) -> tuple[str, str] | None:
        """
        Basic-auth pair for recording downloads.

        API key credentials win over the account SID/auth token pair.
        """
        if self.TWILIO_API_KEY_SID and self.TWILIO_API_KEY_SECRET:
            return self.TWILIO_API_KEY_SID, self.TWILIO_API_KEY_SECRET
        if self.twilio_configured:
            return self.TWILIO_ACCOUNT_SID, self.TWILIO_AUTH_TOKEN
        return None

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
