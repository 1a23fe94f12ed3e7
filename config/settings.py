"""Bot settings, loaded from env / .env."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Remote and exec settings consumed by the core.

    Values come from BOT_-prefixed environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- general ---
    name: str = "bot"
    debug: bool = False
    cli: bool = False
    log_file: str = "server.log"

    # --- slack credentials ---
    slack_token: str | None = None
    # Socket mode is used when an app-level token is present
    slack_app_token: str | None = None
    # Events API (callback mode) is used when only a signing secret is present
    slack_signing_secret: str | None = None

    # --- events API server ---
    slack_events_callback_path: str = "/slack_events/v1/events"
    slack_listener_port: int = Field(3000, ge=1, le=65535)

    # --- interactive components ---
    interactive_components: bool = False
    slack_interactions_callback_path: str | None = None
    interactions_port: int = Field(4000, ge=1, le=65535)

    # --- outbound rate limiting ---
    slack_rate_limit: int = Field(1, ge=1)
    slack_rate_window: float = Field(1.0, gt=0.0)

    @field_validator(
        "slack_token",
        "slack_app_token",
        "slack_signing_secret",
        "slack_interactions_callback_path",
        mode="before",
    )
    @classmethod
    def parse_optional_str(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def socket_mode_enabled(self) -> bool:
        return bool(self.slack_app_token)

    @property
    def events_api_enabled(self) -> bool:
        return bool(self.slack_signing_secret)


@lru_cache
def get_settings() -> Settings:
    return Settings()
