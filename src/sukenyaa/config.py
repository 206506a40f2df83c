"""Centralised configuration via Pydantic Settings."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pipeline configuration loaded from environment variables."""

    model_config = {"env_prefix": "SUKENYAA_", "frozen": True}

    # Upstream sites
    nyaa_base_url: str = "https://nyaa.si"
    sukebei_base_url: str = "https://sukebei.nyaa.si"

    # Fetching
    request_timeout_seconds: float = 10.0
    health_timeout_seconds: float = 5.0
    throttle_delay_seconds: float = 1.0
    user_agent: str = "SukeNyaa/1.0.0 (Stremio Addon)"

    # Retry
    # Backoff doubles per attempt: base, 2*base, 4*base ... capped at max.
    max_retries: int = 3
    retry_base_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 5.0
    # Outer attempts made by the orchestrator around a full fetcher run.
    search_attempts: int = 2

    # Listing
    max_page_size: int = 75

    # Content filter
    enable_nsfw_filter: bool = True
    strict_minor_content_exclusion: bool = True
    # Category rules are per site; codes overlap with different meanings.
    nyaa_blocked_categories: list[str] = []
    sukebei_blocked_categories: list[str] = ["1_3"]
    blocked_keywords: list[str] = [
        "loli",
        "shota",
        "junior",
        "child",
        "kid",
        "underage",
        "elementary",
        "school girl",
        "school boy",
        "jc",
        "js",
        "u15",
        "u12",
        "u18",
        "young",
        "teen",
        "minor",
    ]
    trusted_uploaders_only: bool = False

    # Cache
    search_cache_ttl_seconds: int = 300
    cache_max_entries: int = 1000
    cache_key_prefix: str = "sukenyaa:cache:"

    # Redis (blank keeps the cache in-process only)
    redis_url: str = ""

    log_level: str = "INFO"

    @field_validator("strict_minor_content_exclusion")
    @classmethod
    def _keyword_floor_stays_on(cls, value: bool) -> bool:
        if not value:
            raise ValueError("strict_minor_content_exclusion cannot be disabled")
        return value

    @field_validator("max_retries", "search_attempts", "max_page_size", "cache_max_entries")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value


def get_settings() -> Settings:
    """Factory, overridable in tests."""
    return Settings()
