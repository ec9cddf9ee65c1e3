"""Field options protocol.

Codecs receive per-field shape hints through this interface. Primary fields,
secondary fields and root options all implement it.
"""

from __future__ import annotations

from typing import Any, Protocol

from doc_mapper.core.enums import FieldType


class FieldOptions(Protocol):
    """Per-field shape hints consumed by the codecs."""

    @property
    def name(self) -> str: ...

    @property
    def field_type(self) -> FieldType | None: ...

    @property
    def field_class(self) -> Any: ...

    @property
    def required(self) -> bool: ...

    @property
    def map_value_type(self) -> FieldType | None: ...

    @property
    def element_type(self) -> FieldType | None: ...

    @property
    def is_master(self) -> bool:
        """True when the value is the whole document, not a nested value."""
        ...

    @property
    def is_primary(self) -> bool:
        """True for fields declared directly on a mapped type."""
        ...
