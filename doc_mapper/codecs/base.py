"""Shared codec behaviour."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from doc_mapper.core.enums import FieldType
from doc_mapper.core.exceptions import UnsupportedShapeError
from doc_mapper.mapping.protocol import FieldOptions

if TYPE_CHECKING:
    from doc_mapper.core.mapper import DocumentMapper


def type_name(tp: Any) -> str:
    """Readable name of a type for error messages."""
    return getattr(tp, "__name__", repr(tp))


class BaseCodec(ABC):
    """Base class for the built-in codecs.

    Codecs hold a back-reference to their mapper so that container codecs
    can recurse into sibling codecs through the same dispatch.
    """

    field_type: ClassVar[FieldType]

    def __init__(self, mapper: DocumentMapper) -> None:
        self._mapper = mapper

    @abstractmethod
    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any: ...

    @abstractmethod
    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any: ...

    @abstractmethod
    def is_valid_type(self, tp: Any) -> bool: ...

    def is_valid_field(self, field: FieldOptions) -> bool:
        return self.is_valid_type(field.field_class)

    def is_valid_document_value(self, value: Any) -> bool:
        return value is None

    def _reject(self, value: Any) -> UnsupportedShapeError:
        return UnsupportedShapeError(
            f"{type_name(type(value))} value cannot be stored as {self.field_type.value}"
        )

    def _reject_target(self, value: Any, target: Any) -> UnsupportedShapeError:
        return UnsupportedShapeError(
            f"{self.field_type.value} value {value!r} cannot be read as {type_name(target)}"
        )
