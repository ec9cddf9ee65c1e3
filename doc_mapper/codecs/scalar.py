"""Scalar codecs - strings, numbers, booleans, dates and object ids."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from bson import ObjectId
from bson.decimal128 import Decimal128
from bson.errors import InvalidId

from doc_mapper.codecs.base import BaseCodec
from doc_mapper.core.enums import FieldType
from doc_mapper.mapping.element import Element
from doc_mapper.mapping.protocol import FieldOptions
from doc_mapper.mapping.shapes import origin_of


def _is_subclass(tp: Any, base: type | tuple[type, ...]) -> bool:
    return isinstance(tp, type) and issubclass(tp, base)


class StringCodec(BaseCodec):
    """Strings, plus the types that have a canonical string form.

    Enumerations are stored by member name; integers and object ids by their
    string representation (as map keys must be).
    """

    field_type = FieldType.STRING

    def is_valid_type(self, tp: Any) -> bool:
        origin = origin_of(tp)
        return origin in (str, int, ObjectId) or _is_subclass(origin, Enum)

    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any:
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            raise self._reject(value)
        if isinstance(value, (int, ObjectId)):
            return str(value)
        raise self._reject(value)

    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any:
        origin = origin_of(target)
        if origin is str or origin is Any:
            return value
        try:
            if _is_subclass(origin, Enum):
                return origin[value]
            if origin is int:
                return int(value)
            if origin is ObjectId:
                return ObjectId(value)
        except (KeyError, ValueError, InvalidId) as e:
            raise self._reject_target(value, target) from e
        raise self._reject_target(value, target)

    def is_valid_document_value(self, value: Any) -> bool:
        return value is None or isinstance(value, str)


class NumberCodec(BaseCodec):
    """Integers, floats and decimals. Decimals are stored as Decimal128."""

    field_type = FieldType.NUMBER

    _TYPES = (int, float, Decimal, Decimal128)

    def is_valid_type(self, tp: Any) -> bool:
        return origin_of(tp) in self._TYPES

    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any:
        if isinstance(value, bool) or not isinstance(value, self._TYPES):
            raise self._reject(value)
        if isinstance(value, Decimal):
            return Decimal128(value)
        return value

    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any:
        origin = origin_of(target)
        number = value.to_decimal() if isinstance(value, Decimal128) else value
        try:
            if origin is int:
                return int(number)
            if origin is float:
                return float(number)
            if origin is Decimal:
                return number if isinstance(number, Decimal) else Decimal(str(number))
            if origin is Decimal128:
                return value if isinstance(value, Decimal128) else Decimal128(str(number))
        except (ValueError, InvalidOperation) as e:
            raise self._reject_target(value, target) from e
        return value

    def is_valid_document_value(self, value: Any) -> bool:
        if value is None:
            return True
        return isinstance(value, (int, float, Decimal128)) and not isinstance(value, bool)


class BooleanCodec(BaseCodec):
    field_type = FieldType.BOOLEAN

    def is_valid_type(self, tp: Any) -> bool:
        return origin_of(tp) is bool

    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any:
        if not isinstance(value, bool):
            raise self._reject(value)
        return value

    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any:
        return value

    def is_valid_document_value(self, value: Any) -> bool:
        return value is None or isinstance(value, bool)


class DateCodec(BaseCodec):
    """Datetimes and dates.

    BSON has a single datetime type: naive UTC with millisecond precision.
    Datetimes are stored the way BSON keeps them (aware values converted to
    naive UTC, microseconds truncated to milliseconds), so the document and
    its decoded BSON agree. Dates are stored as midnight datetimes and
    truncated back on decode.
    """

    field_type = FieldType.DATE

    def is_valid_type(self, tp: Any) -> bool:
        return origin_of(tp) in (datetime, date)

    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any:
        if isinstance(value, datetime):
            if value.tzinfo is not None and value.utcoffset() is not None:
                value = value.astimezone(timezone.utc).replace(tzinfo=None)
            return value.replace(microsecond=value.microsecond // 1000 * 1000)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        raise self._reject(value)

    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any:
        if origin_of(target) is date:
            return value.date()
        return value

    def is_valid_document_value(self, value: Any) -> bool:
        return value is None or isinstance(value, datetime)


class ObjectIdCodec(BaseCodec):
    """Object ids and references to persisted elements.

    An element is stored as its id. References are not resolved here:
    decoding into an element type yields None.
    """

    field_type = FieldType.OBJECT_ID

    def is_valid_type(self, tp: Any) -> bool:
        origin = origin_of(tp)
        return origin is ObjectId or _is_subclass(origin, Element)

    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any:
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, Element):
            return value.id
        raise self._reject(value)

    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any:
        if _is_subclass(origin_of(target), Element):
            return None
        return value

    def is_valid_document_value(self, value: Any) -> bool:
        return value is None or isinstance(value, ObjectId)
