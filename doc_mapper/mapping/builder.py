"""Reconstruction builder.

Collects decoded field values and produces the finished object through the
type's declared builder, so the type's own constructor logic always runs.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from doc_mapper.core.exceptions import MetadataError
from doc_mapper.mapping.fields import FieldDescriptor
from doc_mapper.mapping.metadata import TypeMetadata

T = TypeVar("T")


class ReconstructionBuilder(Generic[T]):
    """Accumulates (field, value) pairs for one object under reconstruction.

    Values may be appended in any order. ``build`` calls the declared
    builder exactly once with the values it consumes, then restores the
    remaining non-None values through the field mutators.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def append(self, field: FieldDescriptor, value: Any) -> ReconstructionBuilder[T]:
        """Record the decoded value of a field."""
        self._values[field.name] = value
        return self

    def __contains__(self, field_name: str) -> bool:
        return field_name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def build(self, metadata: TypeMetadata) -> T:
        """Invoke the builder of metadata's type with the accumulated values."""
        spec = metadata.builder
        if spec is None:
            raise MetadataError(
                metadata.target_class.__name__, "type has no builder to reconstruct it"
            )

        instance: T = spec.invoke(self._values)

        consumed = spec.field_names
        for field in metadata.fields:
            if field.name in consumed:
                continue
            value = self._values.get(field.name)
            if value is not None:
                field.set(instance, value)
        return instance
