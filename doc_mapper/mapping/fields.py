"""Field declarations and field descriptor data classes.

Markers (DocField and its typed variants) are attached to class annotations
with ``typing.Annotated``. The extractor turns each marked annotation into a
frozen FieldDescriptor used by the codecs at conversion time.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from doc_mapper.core.enums import FieldType, ValueShape
from doc_mapper.core.exceptions import AccessError


@dataclass(frozen=True)
class DocField:
    """Marks an annotated attribute as a mapped document field.

    Args:
        name: Document key. Defaults to the attribute name.
        field_type: Document value type. Inferred from the annotation if None.
        required: Reject None for this field on encode and decode.
        map_value_type: Value type of a map field's entries.
        element_type: Value type of an array field's items.
    """

    name: str | None = None
    field_type: FieldType | None = None
    required: bool = False
    map_value_type: FieldType | None = None
    element_type: FieldType | None = None


@dataclass(frozen=True)
class StringField(DocField):
    field_type: FieldType | None = FieldType.STRING


@dataclass(frozen=True)
class NumberField(DocField):
    field_type: FieldType | None = FieldType.NUMBER


@dataclass(frozen=True)
class BooleanField(DocField):
    field_type: FieldType | None = FieldType.BOOLEAN


@dataclass(frozen=True)
class DateField(DocField):
    field_type: FieldType | None = FieldType.DATE


@dataclass(frozen=True)
class ObjectIdField(DocField):
    field_type: FieldType | None = FieldType.OBJECT_ID


@dataclass(frozen=True)
class ObjectField(DocField):
    field_type: FieldType | None = FieldType.OBJECT


@dataclass(frozen=True)
class ArrayField(DocField):
    field_type: FieldType | None = FieldType.ARRAY


@dataclass(frozen=True)
class FieldDescriptor:
    """A primary field: one entry of a mapped type's own document."""

    name: str
    attribute: str
    field_type: FieldType
    field_class: Any
    shape: ValueShape
    owner: str
    required: bool = False
    map_value_type: FieldType | None = None
    element_type: FieldType | None = None
    getter: Callable[[Any], Any] | None = field(default=None, repr=False, compare=False)
    setter: Callable[[Any, Any], None] | None = field(default=None, repr=False, compare=False)

    is_master: ClassVar[bool] = False
    is_primary: ClassVar[bool] = True

    def get(self, obj: Any) -> Any:
        """Read this field's value from obj."""
        try:
            if self.getter is not None:
                return self.getter(obj)
            return getattr(obj, self.attribute)
        except AttributeError as e:
            raise AccessError(self.name, self.owner, str(e)) from e

    def set(self, obj: Any, value: Any) -> None:
        """Write value into obj, bypassing frozen or read-only attributes."""
        try:
            if self.setter is not None:
                self.setter(obj, value)
            else:
                object.__setattr__(obj, self.attribute, value)
        except (AttributeError, TypeError) as e:
            raise AccessError(self.name, self.owner, str(e)) from e


@dataclass(frozen=True)
class SecondaryField:
    """Options for a value nested inside a primary field (map entry, array item)."""

    name: str
    field_type: FieldType | None
    field_class: Any
    required: bool = False
    map_value_type: FieldType | None = None
    element_type: FieldType | None = None

    is_master: ClassVar[bool] = False
    is_primary: ClassVar[bool] = False


@dataclass(frozen=True)
class MasterField:
    """Root options: the converted value is the entire document."""

    field_class: Any
    name: str = ""
    field_type: FieldType | None = FieldType.OBJECT
    required: bool = True
    map_value_type: FieldType | None = None
    element_type: FieldType | None = None

    is_master: ClassVar[bool] = True
    is_primary: ClassVar[bool] = False
