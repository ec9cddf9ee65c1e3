"""Codec protocol.

Every codec registered with the DocumentMapper MUST implement this protocol.
The mapper consults it both to pick a codec and to validate declarations.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from doc_mapper.core.enums import FieldType
from doc_mapper.mapping.protocol import FieldOptions


@runtime_checkable
class Codec(Protocol):
    """Converts one field type between Python values and document values."""

    @property
    def field_type(self) -> FieldType:
        """The document field type this codec handles."""
        ...

    def to_document_value(self, value: Any, field: FieldOptions | None) -> Any:
        """Convert a non-None Python value into a document value."""
        ...

    def from_document_value(self, value: Any, target: Any, field: FieldOptions | None) -> Any:
        """Convert a non-None document value into an instance of target."""
        ...

    def is_valid_type(self, tp: Any) -> bool:
        """Check if values of the declared type can be handled."""
        ...

    def is_valid_field(self, field: FieldOptions) -> bool:
        """Check if a declared field, including its shape options, can be handled."""
        ...

    def is_valid_document_value(self, value: Any) -> bool:
        """Check if a stored document value can be read by this codec."""
        ...
