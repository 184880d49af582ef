"""Shared response envelope and wire conventions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model exchanged as camelCase JSON and built from snake_case rows."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(CamelModel):
    """Every response carries ``success`` and an optional human-readable message."""

    success: bool = Field(default=True)
    message: str | None = Field(default=None)
