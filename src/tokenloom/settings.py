"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the token pipeline.

    Values are read from ``TOKENLOOM_``-prefixed environment variables and from
    a ``.env`` file in the working directory.  ``NO_COLOR`` is honoured as well.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOKENLOOM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Diagnostics
    color: bool = False
    no_color: bool = Field(False, validation_alias=AliasChoices("NO_COLOR", "TOKENLOOM_NO_COLOR"))
    cwd: Path = Field(default_factory=Path.cwd)

    # Loader safety limits
    max_document_size: int = 5_000_000  # characters
    max_node_count: int = 200_000
    max_depth: int = 64

    @field_validator("no_color", mode="before")
    @classmethod
    def _no_color_is_set(cls, value: object) -> object:
        # NO_COLOR: any non-empty value other than "0" disables color
        if isinstance(value, str):
            return value.strip() not in ("", "0")
        return value

    @property
    def color_enabled(self) -> bool:
        """Whether diagnostics should carry ANSI styling."""
        return self.color and not self.no_color


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level.upper())
