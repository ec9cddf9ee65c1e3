"""doc_mapper exception hierarchy.

All exceptions are doc_mapper-specific. Reflection errors raised while
reading or writing fields are chained, never exposed directly.
"""

from __future__ import annotations


class DocMapperError(Exception):
    """Base exception for all doc_mapper errors."""


# --- Metadata ---


class MetadataError(DocMapperError):
    """Raised when a mapped type carries inconsistent declarations."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        self.detail = detail
        super().__init__(f"Invalid mapping for {target_class}: {detail}")


# --- Mapping ---


class MappingError(DocMapperError):
    """Base for conversion errors."""


class MissingRequiredFieldError(MappingError):
    """Raised when a required field is absent on encode or decode."""

    def __init__(self, field_name: str, target_class: str | None = None) -> None:
        self.field_name = field_name
        self.target_class = target_class
        where = f" in {target_class}" if target_class else ""
        super().__init__(f"Missing required field '{field_name}'{where}")


class UnsupportedShapeError(MappingError):
    """Raised when a value or declared type matches no codec."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Unsupported shape: {detail}")


class NestingTooDeepError(UnsupportedShapeError):
    """Raised when embedded documents nest deeper than the configured limit."""

    def __init__(self, target_class: str, max_depth: int) -> None:
        self.target_class = target_class
        self.max_depth = max_depth
        super().__init__(
            f"{target_class} nests deeper than {max_depth} embedded documents "
            f"(self-embedding type?)"
        )


class AccessError(MappingError):
    """Raised when a field cannot be read from or written to an object."""

    def __init__(self, field_name: str, target_class: str, detail: str) -> None:
        self.field_name = field_name
        self.target_class = target_class
        super().__init__(f"Cannot access field '{field_name}' of {target_class}: {detail}")
