"""Value-shape classifiers.

Every Python type maps to exactly one ValueShape. Types matching no more
specific shape fall back to OBJECT (a nested document); callables and typing
forms that do not denote a concrete class are UNSUPPORTED.
"""

from __future__ import annotations

import collections.abc
import functools
import types
from collections.abc import Mapping, Sequence
from collections.abc import Set as AbstractSet
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin

from bson import ObjectId
from bson.decimal128 import Decimal128

from doc_mapper.core.enums import FieldType, ValueShape
from doc_mapper.mapping.element import Element
from doc_mapper.mapping.fields import SecondaryField
from doc_mapper.mapping.protocol import FieldOptions

_PRIMITIVES: frozenset[type] = frozenset(
    {str, int, float, bool, Decimal, Decimal128, datetime, date, ObjectId, type(None)}
)

_NUMBERS: frozenset[type] = frozenset({int, float, Decimal, Decimal128})

_CALLABLE_TYPES: tuple[type, ...] = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.ModuleType,
    staticmethod,
    classmethod,
    functools.partial,
)

_BINARY_TYPES: tuple[type, ...] = (bytes, bytearray, memoryview)


def unwrap(tp: Any) -> Any:
    """Strip ``Annotated[...]`` and ``Optional[...]`` wrappers from a type."""
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp = get_args(tp)[0]
            continue
        if origin is Union or origin is types.UnionType:
            members = [arg for arg in get_args(tp) if arg is not type(None)]
            if len(members) == 1:
                tp = members[0]
                continue
        return tp


def origin_of(tp: Any) -> Any:
    """Return the runtime class behind a (possibly generic) type."""
    tp = unwrap(tp)
    return get_origin(tp) or tp


def classify(tp: Any) -> ValueShape:
    """Classify a declared type into its value shape."""
    tp = unwrap(tp)
    if tp is Any:
        return ValueShape.UNSUPPORTED
    origin = get_origin(tp) or tp

    if origin is Union or origin is types.UnionType:
        return ValueShape.UNSUPPORTED
    if origin in _PRIMITIVES:
        return ValueShape.PRIMITIVE
    if not isinstance(origin, type):
        return ValueShape.UNSUPPORTED
    if origin is collections.abc.Callable or issubclass(origin, _CALLABLE_TYPES):
        return ValueShape.UNSUPPORTED
    if issubclass(origin, _BINARY_TYPES):
        return ValueShape.UNSUPPORTED
    if issubclass(origin, Element):
        return ValueShape.ELEMENT
    if issubclass(origin, Enum):
        return ValueShape.ENUM
    if issubclass(origin, Mapping):
        return ValueShape.MAP
    if issubclass(origin, (Sequence, AbstractSet)) and not issubclass(origin, str):
        return ValueShape.ARRAY
    return ValueShape.OBJECT


def classify_value(value: Any) -> ValueShape:
    """Classify a runtime value by its type."""
    return classify(type(value))


def is_primitive(tp: Any) -> bool:
    return classify(tp) is ValueShape.PRIMITIVE


def is_element(tp: Any) -> bool:
    return classify(tp) is ValueShape.ELEMENT


def is_map(tp: Any) -> bool:
    return classify(tp) is ValueShape.MAP


def is_enum(tp: Any) -> bool:
    return classify(tp) is ValueShape.ENUM


def is_array(tp: Any) -> bool:
    return classify(tp) is ValueShape.ARRAY


def infer_field_type(tp: Any) -> FieldType | None:
    """Pick the document field type for a declared type, or None."""
    shape = classify(tp)
    if shape is ValueShape.PRIMITIVE:
        origin = origin_of(tp)
        if origin is bool:
            return FieldType.BOOLEAN
        if origin is str:
            return FieldType.STRING
        if origin in _NUMBERS:
            return FieldType.NUMBER
        if origin in (datetime, date):
            return FieldType.DATE
        if origin is ObjectId:
            return FieldType.OBJECT_ID
        return None
    if shape is ValueShape.ARRAY:
        return FieldType.ARRAY
    if shape is ValueShape.UNSUPPORTED:
        return None
    return FieldType.OBJECT


def map_fields(options: FieldOptions) -> tuple[SecondaryField, SecondaryField]:
    """Build the key and value options of a map-typed field.

    Keys are always stored as strings. The value type comes from the
    field's ``map_value_type`` option or is inferred from the map's value
    type argument.
    """
    args = get_args(unwrap(options.field_class))
    key_class, value_class = args if len(args) == 2 else (str, Any)
    key_field = SecondaryField(options.name, FieldType.STRING, key_class)
    value_field = SecondaryField(
        options.name,
        options.map_value_type or infer_field_type(value_class),
        value_class,
    )
    return key_field, value_field


def item_field(options: FieldOptions) -> SecondaryField:
    """Build the item options of an array-typed field."""
    args = [arg for arg in get_args(unwrap(options.field_class)) if arg is not Ellipsis]
    item_class: Any = args[0] if args and all(arg == args[0] for arg in args) else Any
    item_type = options.element_type or (
        infer_field_type(item_class) if item_class is not Any else None
    )
    return SecondaryField(options.name, item_type, item_class)
