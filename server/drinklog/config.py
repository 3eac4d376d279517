"""
Configuration and settings for the drink log relay.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")
    service_name: str = Field(default="jiu-mengzi-api")
    app_env: str = Field(default="production")
    port: int = Field(default=3000)

    # GitHub repository holding the data file
    github_owner: Optional[str] = Field(default=None)
    github_repo: Optional[str] = Field(default=None)
    github_branch: str = Field(default="main")
    github_token: Optional[str] = Field(default=None)
    github_api_url: str = Field(default="https://api.github.com")
    data_path: str = Field(default="data/drink_data.json")
    request_timeout_seconds: float = Field(default=30)

    # Inbound protection
    cors_origins: list[str] = Field(
        default=["http://localhost:5500", "http://127.0.0.1:5500"]
    )
    cors_origin_regex: Optional[str] = Field(default=r"https://.*\.github\.io")
    rate_limit_max_requests: int = Field(default=100, ge=0)
    rate_limit_window_seconds: int = Field(default=15 * 60, ge=1)
    # Key the rate limit on the first X-Forwarded-For hop (behind a reverse proxy).
    trust_proxy: bool = Field(default=False)
    max_body_bytes: int = Field(default=10 * 1024 * 1024)

    # Development toggles
    use_in_memory_store: bool = Field(
        default=False, validation_alias="DRINKLOG_USE_IN_MEMORY_STORE"
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    @property
    def repository(self) -> str:
        return f"{self.github_owner}/{self.github_repo}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
