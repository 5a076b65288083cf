"""Application configuration utilities."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SORT_VALUES = ("newest", "top-rated", "price-high-low", "price-low-high")


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    api_base_url: AnyHttpUrl = Field(
        default="http://localhost:8000/api/",
        alias="KHADAMAT_API_BASE_URL",
        description="Base URL of the marketplace REST API.",
    )
    concurrency: int = Field(
        default=4,
        alias="KHADAMAT_CONCURRENCY",
        ge=1,
        description="Maximum number of concurrent API requests.",
    )
    timeout_seconds: float = Field(
        default=15.0,
        alias="KHADAMAT_TIMEOUT",
        gt=0,
        description="HTTP timeout in seconds for API calls.",
    )
    cache_ttl_seconds: int = Field(
        default=60,
        alias="KHADAMAT_CACHE_TTL",
        ge=0,
        description="Cache TTL (seconds) for catalog responses. 0 disables caching.",
    )
    user_agent: str = Field(
        default="Khadamat-Core/0.1",
        alias="KHADAMAT_USER_AGENT",
        description="User-Agent header presented to the API.",
    )
    submit_delay_seconds: float = Field(
        default=1.5,
        alias="KHADAMAT_SUBMIT_DELAY",
        ge=0,
        description="Delay used by the simulated account creation call.",
    )
    login_path: str = Field(
        default="/login",
        alias="KHADAMAT_LOGIN_PATH",
        description="Destination the registration wizard navigates to after success.",
    )
    default_sort: str = Field(
        default="newest",
        alias="KHADAMAT_DEFAULT_SORT",
        description="Sort order applied to a fresh service listing.",
    )

    model_config = SettingsConfigDict(
        env_prefix="KHADAMAT_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("default_sort", mode="before")
    @classmethod
    def _normalise_sort(cls, value: str | None) -> str:
        if not value:
            return "newest"
        value = str(value).strip().lower()
        if value not in SORT_VALUES:
            return "newest"
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of application settings."""

    return Settings()
