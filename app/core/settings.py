from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


class AppSettings(BaseModel):
    """Runtime configuration for the API process."""

    title: str = Field(default="Book Reviews API", alias="APP_TITLE")
    database_url: str = Field(default="sqlite:///./bookreviews.db", alias="DATABASE_URL")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ORIGINS",
    )
    seed_database: bool = Field(default=True, alias="SEED_DATABASE")
    default_page_size: int = Field(default=12, alias="DEFAULT_PAGE_SIZE", ge=1)
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE", ge=1)

    model_config = {"populate_by_name": True}

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        if value is None:
            return "INFO"
        return value.upper()


@lru_cache
def get_settings() -> AppSettings:
    """Load application configuration from environment variables."""
    return AppSettings(
        title=os.getenv("APP_TITLE", "Book Reviews API"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./bookreviews.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        cors_origins=_as_list(
            os.getenv("CORS_ORIGINS"),
            default=["http://localhost:3000", "http://localhost:5173"],
        ),
        seed_database=_as_bool(os.getenv("SEED_DATABASE"), default=True),
        default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", "12")),
        max_page_size=int(os.getenv("MAX_PAGE_SIZE", "100")),
    )
