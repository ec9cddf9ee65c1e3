"""Document mapper - the top-level dispatcher.

The DocumentMapper picks a codec for every value by its field type (declared
on the field, or inferred from the value's type) and is the single entry point
codecs recurse through for nested values.
"""

from __future__ import annotations

from typing import Any, TypeVar

import bson

from doc_mapper.codecs.array import ArrayCodec
from doc_mapper.codecs.base import BaseCodec, type_name
from doc_mapper.codecs.object import ObjectCodec
from doc_mapper.codecs.protocol import Codec
from doc_mapper.codecs.scalar import (
    BooleanCodec,
    DateCodec,
    NumberCodec,
    ObjectIdCodec,
    StringCodec,
)
from doc_mapper.core.config import MapperConfig
from doc_mapper.core.enums import FieldType
from doc_mapper.core.exceptions import UnsupportedShapeError
from doc_mapper.core.registry import MetadataRegistry
from doc_mapper.mapping.fields import MasterField
from doc_mapper.mapping.metadata import TypeMetadata
from doc_mapper.mapping.protocol import FieldOptions
from doc_mapper.mapping.shapes import infer_field_type, unwrap

T = TypeVar("T")

# Codec registry: field type → codec class
_CODEC_MAP: dict[FieldType, type[BaseCodec]] = {
    FieldType.STRING: StringCodec,
    FieldType.NUMBER: NumberCodec,
    FieldType.BOOLEAN: BooleanCodec,
    FieldType.DATE: DateCodec,
    FieldType.OBJECT_ID: ObjectIdCodec,
    FieldType.OBJECT: ObjectCodec,
    FieldType.ARRAY: ArrayCodec,
}


class DocumentMapper:
    """Maps annotated objects to BSON documents and back.

    Args:
        config: Mapper configuration. Defaults to MapperConfig().
    """

    def __init__(self, config: MapperConfig | None = None) -> None:
        self._config = config or MapperConfig()
        self._metadata = MetadataRegistry(
            self.is_valid_field,
            check_param_shapes=self._config.check_builder_types,
        )
        self._codecs: dict[FieldType, Codec] = {
            field_type: codec_cls(self) for field_type, codec_cls in _CODEC_MAP.items()
        }

    @property
    def config(self) -> MapperConfig:
        return self._config

    @property
    def metadata(self) -> MetadataRegistry:
        return self._metadata

    def get_metadata(self, cls: type) -> TypeMetadata:
        """Return the (cached) metadata of a mapped class."""
        return self._metadata.get(cls)

    def codec_for(self, field_type: FieldType) -> Codec:
        """Look up the codec registered for a field type."""
        try:
            return self._codecs[field_type]
        except KeyError:
            raise UnsupportedShapeError(f"no codec for field type {field_type!r}") from None

    def _select(self, tp: Any, field: FieldOptions | None) -> Codec:
        field_type = field.field_type if field is not None else None
        if field_type is None:
            field_type = infer_field_type(tp)
        if field_type is None:
            raise UnsupportedShapeError(f"no codec handles {type_name(unwrap(tp))}")
        return self.codec_for(field_type)

    # --- Conversion ---

    def to_document_value(self, value: Any, field: FieldOptions | None = None) -> Any:
        """Convert a Python value into a document value.

        Raises:
            MissingRequiredFieldError: A required field of a nested object is None.
            UnsupportedShapeError: No codec can store the value.
            AccessError: A field could not be read.
        """
        if value is None:
            return None
        codec = self._select(type(value), field)
        if not codec.is_valid_type(type(value)):
            raise UnsupportedShapeError(
                f"{type_name(type(value))} value cannot be stored as {codec.field_type.value}"
            )
        return codec.to_document_value(value, field)

    def from_document_value(
        self,
        value: Any,
        target: Any,
        field: FieldOptions | None = None,
    ) -> Any:
        """Convert a document value into an instance of target.

        Returns None for None values and for unresolved element references.

        Raises:
            MissingRequiredFieldError: A required field is missing from a document.
            UnsupportedShapeError: No codec can read the value as target.
            AccessError: A field could not be restored.
        """
        if value is None:
            return None
        if unwrap(target) is Any and (field is None or field.field_type is None):
            return value
        codec = self._select(target, field)
        if not codec.is_valid_type(target):
            raise UnsupportedShapeError(
                f"{type_name(unwrap(target))} cannot be read as {codec.field_type.value}"
            )
        if not codec.is_valid_document_value(value):
            raise UnsupportedShapeError(
                f"{type_name(type(value))} document value cannot be read as "
                f"{codec.field_type.value}"
            )
        return codec.from_document_value(value, target, field)

    # --- Capability queries ---

    def is_valid_type(self, tp: Any) -> bool:
        """Check if any codec can handle values of tp."""
        return any(codec.is_valid_type(tp) for codec in self._codecs.values())

    def is_valid_field(self, field: FieldOptions) -> bool:
        """Check if a declared field, with its shape options, can be mapped."""
        field_type = field.field_type or infer_field_type(field.field_class)
        if field_type is None or field_type not in self._codecs:
            return False
        return self._codecs[field_type].is_valid_field(field)

    def is_valid_document_value(self, value: Any) -> bool:
        """Check if any codec can read a stored document value."""
        return any(codec.is_valid_document_value(value) for codec in self._codecs.values())

    # --- Whole documents ---

    def to_document(self, obj: Any) -> dict[str, Any]:
        """Convert an object into the document that stores it."""
        return self.to_document_value(obj, MasterField(type(obj)))

    def from_document(self, document: dict[str, Any], cls: type[T]) -> T:
        """Reconstruct an instance of cls from its document."""
        return self.from_document_value(document, cls, MasterField(cls))

    def to_documents(self, objs: list[Any]) -> list[dict[str, Any]]:
        """Convert all objects via to_document."""
        return [self.to_document(obj) for obj in objs]

    def from_documents(self, documents: list[dict[str, Any]], cls: type[T]) -> list[T]:
        """Reconstruct all documents via from_document."""
        return [self.from_document(document, cls) for document in documents]

    def encode(self, obj: Any) -> bytes:
        """Serialize an object to binary BSON."""
        return bson.encode(self.to_document(obj))

    def decode(self, data: bytes, cls: type[T]) -> T:
        """Deserialize binary BSON into an instance of cls."""
        return self.from_document(bson.decode(data), cls)
