"""Field type and value shape enumerations."""

from __future__ import annotations

from enum import Enum


class FieldType(Enum):
    """Document value types a field can be declared as."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT_ID = "object_id"
    OBJECT = "object"
    ARRAY = "array"


class ValueShape(Enum):
    """Classification of a Python type for codec selection."""

    PRIMITIVE = "primitive"
    ELEMENT = "element"
    MAP = "map"
    ENUM = "enum"
    OBJECT = "object"
    ARRAY = "array"
    UNSUPPORTED = "unsupported"
