"""Stamper configuration with Pydantic settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StamperSettings(BaseSettings):
    """Defaults applied to every stamping session.

    Precedence: constructor argument > environment variable > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="PDF_STAMPER_",
        case_sensitive=False,
        extra="ignore",
    )

    default_font: str | None = Field(
        default=None,
        description="Standard PDF font applied to every field when a template opens",
    )

    strict_field_kinds: bool = Field(
        default=False,
        description="Raise instead of logging when an operation targets the wrong field kind",
    )

    compress_output: bool = Field(
        default=True,
        description="Deflate streams and drop unused objects in the output PDF",
    )
