"""
Shared configuration management for the Heritage Console.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PUBLIC_ENDPOINTS: List[str] = [
    "/api/heritage-sites",
    "/api/heritage-sites/search",
    "/api/heritage-sites/statistics",
    "/api/users/statistics",
    "/api/documents/statistics",
    "/api/artifacts/statistics",
    "/api/education/articles/statistics",
    "/api/testimonials",
    "/api/languages",
    "/api/translations/text",
    "/api/translations/content",
    "/api/forum/topics",
    "/api/forum/posts",
    "/api/education/articles",
    "/api/education/quizzes",
]


class ConsoleSettings(BaseSettings):
    """Configuration for the console data-access layer."""

    model_config = SettingsConfigDict(
        env_prefix="CONSOLE_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Backend
    api_base_url: str = Field(default="http://localhost:8080")
    request_timeout: float = Field(default=30.0, gt=0)
    transfer_timeout: float = Field(default=60.0, gt=0)

    # Retry policy
    retry_attempts: int = Field(default=2, ge=0)
    retry_delay: float = Field(default=1.0, ge=0)

    # Response cache
    cache_ttl: float = Field(default=5.0, ge=0)
    cache_max_entries: Optional[int] = Field(default=None, gt=0)
    public_endpoints: List[str] = Field(default_factory=lambda: list(DEFAULT_PUBLIC_ENDPOINTS))

    # Credentials
    token_file: Optional[Path] = Field(default=None)

    # Downloads
    download_dir: Path = Field(default=Path("downloads"))

    # Notifications
    notification_duration: float = Field(default=5.0, gt=0)


def get_config(**overrides) -> ConsoleSettings:
    """Get console configuration, applying explicit overrides over the environment."""
    return ConsoleSettings(**overrides)
