"""Unit tests for MetadataRegistry."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Annotated

import pytest

from doc_mapper.core.exceptions import MetadataError
from doc_mapper.core.registry import MetadataRegistry
from doc_mapper.mapping.fields import NumberField, StringField
from doc_mapper.mapping.metadata import builder
from doc_mapper.mapping.protocol import FieldOptions


class City:
    name: Annotated[str, StringField("name")]

    @builder
    def __init__(self, name: str) -> None:
        self.name = name


class Gauge:
    level: Annotated[float, NumberField("level")]

    @builder
    def __init__(self, level: float) -> None:
        self.level = level


class Broken:
    name: Annotated[str, StringField()]


class TestMetadataRegistry:
    def test_get_extracts_metadata(self) -> None:
        registry = MetadataRegistry()
        metadata = registry.get(City)
        assert metadata.target_class is City
        assert metadata.field_names == ["name"]

    def test_get_is_memoized(self) -> None:
        registry = MetadataRegistry()
        assert registry.get(City) is registry.get(City)

    def test_has(self) -> None:
        registry = MetadataRegistry()
        assert registry.has(City) is False
        registry.get(City)
        assert registry.has(City) is True

    def test_types_in_extraction_order(self) -> None:
        registry = MetadataRegistry()
        registry.get(Gauge)
        registry.get(City)
        assert registry.types == [Gauge, City]

    def test_len(self) -> None:
        registry = MetadataRegistry()
        registry.get(City)
        registry.get(Gauge)
        registry.get(City)
        assert len(registry) == 2

    def test_invalid_type_raises(self) -> None:
        registry = MetadataRegistry()
        with pytest.raises(MetadataError, match="no builder"):
            registry.get(Broken)
        assert registry.has(Broken) is False

    def test_failure_is_not_cached(self) -> None:
        calls: list[str] = []

        def flaky(field: FieldOptions) -> bool:
            calls.append(field.name)
            return len(calls) > 1

        registry = MetadataRegistry(flaky)
        with pytest.raises(MetadataError):
            registry.get(City)
        assert registry.get(City).field_names == ["name"]
        assert calls == ["name", "name"]

    def test_validator_is_applied(self) -> None:
        registry = MetadataRegistry(lambda field: field.field_class is not float)
        assert registry.get(City).field_names == ["name"]
        with pytest.raises(MetadataError, match="not supported"):
            registry.get(Gauge)

    def test_concurrent_lookups_agree(self) -> None:
        registry = MetadataRegistry()
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: registry.get(City), range(64)))
        assert all(r.field_names == ["name"] for r in results)
        assert all(r == results[0] for r in results)
        assert len(registry) == 1
