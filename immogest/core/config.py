"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# Placeholder sentinels shipped as defaults. The hosted backend is only
# considered configured when both values differ from these.
PLACEHOLDER_SUPABASE_URL = "https://placeholder.supabase.co"
PLACEHOLDER_SUPABASE_ANON_KEY = "placeholder-key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "ImmoGest"
    debug: bool = False
    api_v1_prefix: str = "/v1"
    allowed_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    # Hosted backend (PostgREST-compatible)
    supabase_url: str = PLACEHOLDER_SUPABASE_URL
    supabase_anon_key: str = PLACEHOLDER_SUPABASE_ANON_KEY
    probe_on_startup: bool = True

    # Resilient read policy
    request_timeout_ms: int = 5000
    max_retries: int = 2
    retry_backoff_ms: int = 1000

    # Notification side-channel
    notification_buffer_size: int = 50

    @property
    def is_backend_configured(self) -> bool:
        """True when the backend URL and key are not the shipped placeholders."""
        return (
            bool(self.supabase_url)
            and bool(self.supabase_anon_key)
            and self.supabase_url != PLACEHOLDER_SUPABASE_URL
            and self.supabase_anon_key != PLACEHOLDER_SUPABASE_ANON_KEY
        )

    @property
    def rest_url(self) -> str:
        """Base URL of the table REST interface."""
        return f"{self.supabase_url.rstrip('/')}/rest/v1"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
