"""
Server settings, read from ``WEBAPP_*`` environment variables (or ``.env``).
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ServerConfig(BaseSettings):
    """Where to listen and how loudly to log."""

    model_config = SettingsConfigDict(
        env_prefix="WEBAPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    host: str = Field(default="0.0.0.0", min_length=1, description="Bind address")
    port: int = Field(default=8080, ge=0, le=65535, description="Bind port (0 = ephemeral)")
    log_level: LogLevel = Field(default="INFO", description="Root logging level")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
