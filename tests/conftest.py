"""Shared test fixtures."""

from __future__ import annotations

import pytest

from doc_mapper.core.config import MapperConfig
from doc_mapper.core.mapper import DocumentMapper


@pytest.fixture
def config() -> MapperConfig:
    """Default mapper configuration."""
    return MapperConfig()


@pytest.fixture
def mapper(config: MapperConfig) -> DocumentMapper:
    """A fresh mapper with an empty metadata cache."""
    return DocumentMapper(config)


@pytest.fixture
def shallow_mapper() -> DocumentMapper:
    """Mapper that allows at most two levels of embedded documents."""
    return DocumentMapper(MapperConfig(max_depth=2))
