"""Library Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - Every setting has a safe default: the library works without a .env file
    - get_settings() is cached (lru_cache): single instance per process
    - core/ never reads settings; policies are built from them by the caller

Design Decisions:
    - DOMAINGUARD_ prefix: embedding applications keep their own namespace
    - log_format validated here so setup_logging never sees an unknown format
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """domainguard settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="DOMAINGUARD_", case_sensitive=False,
        extra="ignore",
    )

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        v = str(v).strip().lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    # Accounts
    username_min_length: int = 1
    username_max_length: int = 32
    password_min_length: int = 1
    reserved_usernames: list[str] = ["admin", "root", "system"]
    bcrypt_rounds: int = 12

    # Groups
    group_name_max_length: int = 80
    group_max_members: int = 500

    # Messaging
    message_max_length: int = 4000


@lru_cache
def get_settings() -> Settings:
    return Settings()
