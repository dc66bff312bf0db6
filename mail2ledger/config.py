"""
Centralized configuration using Pydantic Settings.

All environment variables are loaded and validated here.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gmail (token file is produced by the OAuth login flow)
    gmail_token_file: str = ".token.json"
    gmail_user_id: str = "me"

    # Cursor state
    state_file: str = ".last_read_state.json"

    # Ledger
    ledger_url: str = "http://localhost:3333"
    ledger_timeout_seconds: float = 30.0

    # Polling
    scheduler_enabled: bool = True
    poll_interval_seconds: int = 30
    page_size: int = 100

    # HTTP server
    listen_host: str = "0.0.0.0"
    listen_port: int = 8999

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


# Global settings instance
settings = Settings()
