"""Array codec - lists, tuples and sets."""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from collections.abc import Set as AbstractSet
from typing import Any

from doc_mapper.codecs.base import BaseCodec, type_name
from doc_mapper.core.enums import FieldType, ValueShape
from doc_mapper.core.exceptions import UnsupportedShapeError
from doc_mapper.mapping.fields import SecondaryField
from doc_mapper.mapping.protocol import FieldOptions
from doc_mapper.mapping.shapes import classify, item_field, origin_of


class ArrayCodec(BaseCodec):
    """Stores collections as document arrays.

    Items are converted through the mapper with the item options derived
    from the declared collection type (``list[str]`` → string items). An
    untyped collection stores its items by their runtime type and decodes
    them as-is. Decoding rebuilds the declared concrete container type
    (``deque[int]`` → deque); abstract sequences come back as lists.
    """

    field_type = FieldType.ARRAY

    def is_valid_type(self, tp: Any) -> bool:
        return classify(tp) is ValueShape.ARRAY

    def is_valid_field(self, field: FieldOptions) -> bool:
        if not self.is_valid_type(field.field_class):
            return False
        item = item_field(field)
        if item.field_type is None:
            return item.field_class is Any
        return self._mapper.is_valid_field(item)

    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any:
        if isinstance(value, (str, bytes, Mapping)) or classify(type(value)) is not ValueShape.ARRAY:
            raise self._reject(value)
        item = self._item_options(type(value), field)
        options = item if item.field_type is not None else None
        return [self._mapper.to_document_value(v, options) for v in value]

    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any:
        item = self._item_options(target, field)
        if item.field_class is Any:
            items = list(value)
        else:
            items = [self._mapper.from_document_value(v, item.field_class, item) for v in value]

        origin = origin_of(target)
        if origin is list or not isinstance(origin, type):
            return items
        if inspect.isabstract(origin):
            return set(items) if issubclass(origin, AbstractSet) else items
        try:
            return origin(items)
        except (TypeError, ValueError) as e:
            raise UnsupportedShapeError(
                f"cannot rebuild {type_name(origin)} from a document array"
            ) from e

    def is_valid_document_value(self, value: Any) -> bool:
        return value is None or isinstance(value, list)

    def _item_options(self, tp: Any, field: FieldOptions | None) -> SecondaryField:
        if field is None:
            return item_field(SecondaryField("", FieldType.ARRAY, tp))
        return item_field(field)
