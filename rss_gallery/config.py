"""Configuration management for RSS Gallery."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="RSSG_", extra="ignore")

    # Feed source
    feed_url: str = ""
    title: str = ""

    # Transport
    feed_transport: str = Field(default="direct", pattern="^(direct|authenticated)$")
    feed_auth_token: str = Field(default="")
    feed_timeout_seconds: float | None = None  # no guard timer by default
    image_probe_timeout_seconds: float | None = None

    # Pagination
    default_page_size: int = Field(default=6, ge=1)
    card_width: int = 296
    card_gap: int = 16
    wide_columns: int = 4
    wide_page_size: int = Field(default=8, ge=1)
    narrow_page_size: int = Field(default=6, ge=1)
    resize_debounce_ms: int = 150
    resize_hysteresis_px: float = Field(default=8, ge=0)

    # Image preloading
    preload_wave_delay_ms: int = 1000
    preload_batch_window_ms: int = 50

    # Rendering
    date_format: str = "%d.%m.%Y"

    # CORS and framing
    portal_origin: str = ""
    frontend_origin: str = "http://localhost:5173"

    # Logging
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")

    # Environment
    env: str = Field(default="dev", pattern="^(dev|prod)$")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
