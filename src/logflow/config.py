"""Configuration via pydantic-settings."""
from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Logflow configuration, loaded from LOGFLOW_* env vars or a .env file."""

    model_config = SettingsConfigDict(env_prefix="LOGFLOW_", env_file=".env", extra="ignore")

    output_dir: Path = Field(default=Path("reports"), description="Parent folder for run directories")
    parsers: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Parser ids in priority order (empty = json, apache)",
    )
    encoding: str = Field(default="utf-8", description="Text encoding of input log files")
    log_level: str = Field(default="WARNING", description="Logging level for the CLI")

    @field_validator("parsers", mode="before")
    @classmethod
    def _split_ids(cls, v: Any) -> Any:
        # Accept "json,apache" as well as a list
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


def get_settings(**overrides: Any) -> Settings:
    """Load settings from the environment, with keyword overrides applied on top."""
    return Settings(**overrides)
