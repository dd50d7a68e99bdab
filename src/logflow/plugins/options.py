"""Typed option models for the configurable built-in plugins.

The registry validates raw ``{name: value}`` mappings (from the CLI or code)
through these models before calling a plugin factory, so factories always
receive well-typed keyword arguments.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..aggregators.error_rate import DEFAULT_BUCKET_FORMAT


class PluginOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class RegexFilterOptions(PluginOptions):
    field: str | None = Field(
        default=None,
        description="Field to test: level, message, source or an attribute name.",
    )
    regex: str | None = Field(
        default=None,
        description="Case-insensitive pattern searched anywhere in the field value.",
    )


class TimeRangeFilterOptions(PluginOptions):
    start: datetime | None = Field(default=None, description="Inclusive lower bound (ISO-8601).")
    end: datetime | None = Field(default=None, description="Inclusive upper bound (ISO-8601).")


class TopAttributeOptions(PluginOptions):
    attribute: str = Field(default="path", description="Attribute whose values are counted.")
    top_n: int = Field(default=10, ge=0, description="Number of rows to report.")
    header: str = Field(default="Endpoint", description="Column header for the attribute value.")
    label: str = Field(default="Endpoints", description="Plural noun used in the table title.")


class ErrorRateOptions(PluginOptions):
    bucket_format: str = Field(
        default=DEFAULT_BUCKET_FORMAT,
        description="strftime pattern for bucket keys, e.g. %Y-%m-%dT%H:%M for per-minute.",
    )

    @field_validator("bucket_format")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("bucket_format must not be empty")
        return v
