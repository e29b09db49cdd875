"""Application configuration settings."""

from __future__ import annotations

import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key used to verify bearer tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before minted access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used for persisted timestamps",
    )
    upload_dir: Path = Field(
        default=Path(tempfile.gettempdir()) / "pricelist_uploads",
        description="Directory where accepted price-list files are stored",
    )
    max_upload_bytes: int = Field(
        default=20 * 1024 * 1024,
        description="Largest accepted upload in bytes",
        gt=0,
    )
    validation_batch_size: int = Field(
        default=100,
        description="Rows persisted per batch while validating an import",
        gt=0,
    )
    commit_progress_interval: int = Field(
        default=50,
        description="Rows applied between progress updates while committing",
        gt=0,
    )
    sample_row_count: int = Field(
        default=5,
        description="Decoded rows returned to the operator after an upload",
        ge=0,
    )
    import_permission: str = Field(
        default="products.import",
        description="Permission a bearer token must carry to use the import API",
        min_length=1,
    )
    recover_interrupted_imports: bool = Field(
        default=True,
        description=(
            "Fail imports left validating or importing by a previous process on startup"
        ),
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:4200"],
        description="Origins allowed to call the API from a browser",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @model_validator(mode="after")
    def _validate_log_level(self) -> "Settings":
        self.log_level = self.log_level.upper()
        if self.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
