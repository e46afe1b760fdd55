"""Settings for the blog, read from the environment and ``.env``."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration. Field names map to upper-case variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="inkwell", description="Used in logs and log file names")
    app_version: str = Field(default="0.1.0")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development"
    )
    debug: bool = Field(default=True)
    site_title: str = Field(default="Inkwell", description="Site name in the page header")

    # Server (python -m src)
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_workers: int = Field(default=1)
    api_reload: bool = Field(default=True, description="Reload on code changes")

    # Content store
    sanity_project_id: str | None = Field(default=None, description="Project the posts live in")
    sanity_dataset: str = Field(default="production")
    sanity_api_token: str | None = Field(
        default=None, description="Write token; without it comments are rejected"
    )
    sanity_api_version: str = Field(default="2021-08-11", description="Dated API version")
    sanity_use_cdn: bool | None = Field(
        default=None, description="Read from the API CDN; unset means production only"
    )
    sanity_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # Rendered pages
    page_revalidate_seconds: int = Field(
        default=60, description="Age after which a page is served stale and re-rendered"
    )
    pages_prerender_on_startup: bool = Field(default=False)
    page_cache_backend: Literal["memory", "redis"] = Field(default="memory")
    page_cache_key_prefix: str = Field(default="inkwell:pages:")

    # Redis, only with page_cache_backend=redis
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_max_connections: int = Field(default=10)
    redis_socket_timeout: float = Field(default=5.0)
    redis_socket_connect_timeout: float = Field(default=5.0)
    redis_retry_on_timeout: bool = Field(default=True)
    redis_health_check_interval: int = Field(default=30)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="DEBUG"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Console output only; files are always JSON"
    )
    log_include_caller_info: bool = Field(default=True)
    log_dir: str = Field(default="logs")
    log_file_max_bytes: int = Field(default=10 * 1024 * 1024)
    log_file_backup_count: int = Field(default=5)
    log_requests: bool = Field(default=True, description="Access log lines per request")
    log_exclude_paths: list[str] = Field(
        default=["/health"], description="Path prefixes left out of the access log"
    )

    # CORS
    cors_origins: list[str] = Field(default=["*"])
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])
    cors_max_age: int = Field(default=600)

    @model_validator(mode="after")
    def _default_use_cdn(self) -> "Settings":
        if self.sanity_use_cdn is None:
            self.sanity_use_cdn = self.environment == "production"
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def content_store_configured(self) -> bool:
        """Enough configuration to read posts."""
        return bool(self.sanity_project_id and self.sanity_dataset)

    @property
    def content_store_writable(self) -> bool:
        """Enough configuration to create comments."""
        return self.content_store_configured and bool(self.sanity_api_token)


@lru_cache
def get_settings() -> Settings:
    return Settings()
