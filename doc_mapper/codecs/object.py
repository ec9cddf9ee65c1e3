"""Object codec - nested documents, element references, maps and enums.

Encode precedence: master field → element reference → map (primary fields
only) → enumeration → generic object. Decode mirrors it, except that an
element is only reconstructed when it is the master document; anywhere else
it is a reference and is not resolved here.
"""

from __future__ import annotations

import inspect
import threading
from collections import defaultdict
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any

from bson import ObjectId

from doc_mapper.codecs.base import BaseCodec, type_name
from doc_mapper.core.enums import FieldType, ValueShape
from doc_mapper.core.exceptions import (
    MissingRequiredFieldError,
    NestingTooDeepError,
    UnsupportedShapeError,
)
from doc_mapper.mapping.builder import ReconstructionBuilder
from doc_mapper.mapping.fields import FieldDescriptor
from doc_mapper.mapping.protocol import FieldOptions
from doc_mapper.mapping.shapes import classify, map_fields, origin_of

if TYPE_CHECKING:
    from doc_mapper.core.mapper import DocumentMapper

_VALID_SHAPES = frozenset(
    {ValueShape.OBJECT, ValueShape.ELEMENT, ValueShape.MAP, ValueShape.ENUM}
)


def _check_required(field: FieldDescriptor, value: Any) -> None:
    if field.required and value is None:
        raise MissingRequiredFieldError(field.name, field.owner)


def _nested_map_error() -> UnsupportedShapeError:
    return UnsupportedShapeError("maps are only supported as primary fields (nested maps are not)")


class ObjectCodec(BaseCodec):
    """Converts mapped objects to embedded documents and back."""

    field_type = FieldType.OBJECT

    def __init__(self, mapper: DocumentMapper) -> None:
        super().__init__(mapper)
        self._enum_key = mapper.config.enum_key
        self._max_depth = mapper.config.max_depth
        self._depth = threading.local()

    # --- Validation ---

    def is_valid_type(self, tp: Any) -> bool:
        return classify(tp) in _VALID_SHAPES

    def is_valid_field(self, field: FieldOptions) -> bool:
        if not self.is_valid_type(field.field_class):
            return False
        if classify(field.field_class) is not ValueShape.MAP:
            return True
        if not field.is_primary:
            return False
        key_field, value_field = map_fields(field)
        return self._mapper.is_valid_field(key_field) and self._mapper.is_valid_field(value_field)

    def is_valid_document_value(self, value: Any) -> bool:
        return value is None or isinstance(value, (Mapping, ObjectId))

    # --- Encode ---

    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any:
        shape = classify(type(value))

        if field is not None and field.is_master and shape in (ValueShape.OBJECT, ValueShape.ELEMENT):
            return self._from_object(value)
        if shape is ValueShape.ELEMENT:
            return value.id
        if shape is ValueShape.MAP:
            if field is None or not field.is_primary:
                raise _nested_map_error()
            return self._from_map(value, field)
        if shape is ValueShape.ENUM:
            return self._from_enum(value)
        if shape is ValueShape.OBJECT:
            return self._from_object(value)
        raise self._reject(value)

    def _from_object(self, value: Any) -> dict[str, Any]:
        metadata = self._mapper.get_metadata(type(value))
        document: dict[str, Any] = {}
        with self._descend(type(value)):
            for field in metadata.fields:
                field_value = field.get(value)
                _check_required(field, field_value)
                document[field.name] = self._mapper.to_document_value(field_value, field)
        return document

    def _from_enum(self, value: Enum) -> dict[str, Any]:
        document = self._from_object(value)
        document[self._enum_key] = value.name
        return document

    def _from_map(self, value: Mapping[Any, Any], field: FieldOptions) -> dict[str, Any]:
        key_field, value_field = map_fields(field)
        document: dict[str, Any] = {}
        for key, item in value.items():
            doc_key = self._mapper.to_document_value(key, key_field)
            if not isinstance(doc_key, str):
                raise UnsupportedShapeError(
                    f"map key {key!r} of field '{field.name}' has no string form"
                )
            document[doc_key] = self._mapper.to_document_value(item, value_field)
        return document

    # --- Decode ---

    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any:
        shape = classify(target)

        if field is not None and field.is_master and shape is ValueShape.ELEMENT:
            return self._to_object(value, target)
        if shape is ValueShape.ELEMENT:
            return None
        if shape is ValueShape.MAP:
            if field is None or not field.is_primary:
                raise _nested_map_error()
            return self._to_map(value, field)
        if shape is ValueShape.ENUM:
            return self._to_enum(value, target)
        if shape is ValueShape.OBJECT:
            return self._to_object(value, target)
        raise self._reject_target(value, target)

    def _to_object(self, value: Any, target: Any) -> Any:
        cls = origin_of(target)
        document = self._as_document(value, cls)
        metadata = self._mapper.get_metadata(cls)
        builder: ReconstructionBuilder[Any] = ReconstructionBuilder()
        with self._descend(cls):
            for field in metadata.fields:
                raw = document.get(field.name)
                _check_required(field, raw)
                builder.append(field, self._mapper.from_document_value(raw, field.field_class, field))
        return builder.build(metadata)

    def _to_enum(self, value: Any, target: Any) -> Enum:
        cls = origin_of(target)
        document = self._as_document(value, cls)
        metadata = self._mapper.get_metadata(cls)
        for field in metadata.fields:
            _check_required(field, document.get(field.name))

        name = document.get(self._enum_key)
        if name is None:
            raise MissingRequiredFieldError(self._enum_key, cls.__name__)
        try:
            return cls[name]
        except KeyError:
            raise UnsupportedShapeError(f"{cls.__name__} has no member {name!r}") from None

    def _to_map(self, value: Any, field: FieldOptions) -> Any:
        origin = origin_of(field.field_class)
        document = self._as_document(value, origin)
        key_field, value_field = map_fields(field)
        result: dict[Any, Any] = {}
        for doc_key, item in document.items():
            key = self._mapper.from_document_value(doc_key, key_field.field_class, key_field)
            result[key] = self._mapper.from_document_value(item, value_field.field_class, value_field)

        if origin is dict or inspect.isabstract(origin):
            return result
        # defaultdict takes its factory first; the factory is not stored
        if issubclass(origin, defaultdict):
            return origin(None, result)
        try:
            return origin(result)
        except (TypeError, ValueError) as e:
            raise UnsupportedShapeError(
                f"cannot rebuild {type_name(origin)} from the document of field '{field.name}'"
            ) from e

    # --- Helpers ---

    def _as_document(self, value: Any, cls: Any) -> Mapping[str, Any]:
        if not isinstance(value, Mapping):
            raise UnsupportedShapeError(
                f"expected an embedded document for {type_name(cls)}, got {type_name(type(value))}"
            )
        return value

    @contextmanager
    def _descend(self, cls: type) -> Iterator[None]:
        """Track embedding depth of the current thread's conversion."""
        depth = getattr(self._depth, "value", 0) + 1
        if depth > self._max_depth:
            raise NestingTooDeepError(cls.__name__, self._max_depth)
        self._depth.value = depth
        try:
            yield
        finally:
            self._depth.value = depth - 1
