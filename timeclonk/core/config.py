"""Application configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DAY_MS = 24 * 60 * 60 * 1000


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "timeclonk"
    app_env: str = "development"
    debug: bool = False

    ip: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    db_path: Path = Path("./timeclonk.db")
    # Bounded wait on SQLite lock contention; exceeding it raises StoreTimeoutError.
    db_busy_timeout_seconds: float = Field(default=5.0, gt=0)
    db_pool_size: int = Field(default=5, ge=1)
    db_pool_timeout_seconds: float = Field(default=10.0, gt=0)

    login_token_expiration_ms: int = Field(default=7 * DAY_MS, ge=0)
    email_token_expiration_ms: int = Field(default=DAY_MS, ge=0)
    reset_token_expiration_ms: int = Field(default=DAY_MS, ge=0)
    token_purge_interval_seconds: int = Field(default=24 * 60 * 60, ge=1)

    invoice_dir: Path = Path("invoices")
    invoice_template: Path = Path("invoice.typ")
    typst_binary: str = "typst"

    # Keep .env support for comma-separated values (non-JSON).
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:8001",
            "http://127.0.0.1:8001",
        ]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""

    return Settings()
