"""Application configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .emv import MAX_SEGMENTS


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class Settings(BaseSettings):
    """Central application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="khqrkit")
    environment: Literal["development", "staging", "production"] = Field(default="development")
    api_key: str = Field(default="dev-secret-key", validation_alias=AliasChoices("KHQRKIT_API_KEY", "API_KEY"))
    max_tlv_segments: int = Field(default=MAX_SEGMENTS, ge=16, le=256)
    qr_width: int = Field(default=300, ge=120, le=1200, description="Rendered QR image width in pixels")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized application settings."""

    return Settings()


settings = get_settings()
