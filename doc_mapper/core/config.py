"""Mapper configuration.

MapperConfig is a Pydantic model holding the tunables of a DocumentMapper.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MapperConfig(BaseModel):
    """Configuration for document mapping."""

    model_config = ConfigDict(frozen=True)

    enum_key: str = "_enumValue"
    max_depth: int = Field(default=64, ge=1)
    check_builder_types: bool = True
