"""Metadata registry - memoizes compiled type metadata per class.

Metadata is extracted lazily on first use and kept for the lifetime of the
registry. Type shapes are static, so entries are never invalidated.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

from doc_mapper.core.exceptions import MetadataError
from doc_mapper.mapping.metadata import TypeMetadata, extract_metadata
from doc_mapper.mapping.protocol import FieldOptions

logger = structlog.get_logger(__name__)


class MetadataRegistry:
    """Thread-safe cache of TypeMetadata keyed by class.

    Reads never block. Concurrent misses on the same class may extract twice;
    both results are equivalent and the last writer wins. Failed extractions
    are not cached, so the next lookup retries.

    Args:
        validator: Field validator passed to extract_metadata.
        check_param_shapes: Compare builder annotations with field shapes.
    """

    def __init__(
        self,
        validator: Callable[[FieldOptions], bool] | None = None,
        *,
        check_param_shapes: bool = True,
    ) -> None:
        self._validator = validator
        self._check_param_shapes = check_param_shapes
        self._metadata: dict[type, TypeMetadata] = {}
        self._lock = threading.Lock()

    def get(self, cls: type) -> TypeMetadata:
        """Return the metadata of cls, extracting it on first use.

        Raises:
            MetadataError: If cls carries inconsistent declarations.
        """
        cached = self._metadata.get(cls)
        if cached is not None:
            return cached

        try:
            metadata = extract_metadata(
                cls,
                self._validator,
                check_param_shapes=self._check_param_shapes,
            )
        except MetadataError as e:
            logger.warning(
                "metadata_extraction_failed",
                target_class=e.target_class,
                detail=e.detail,
            )
            raise

        with self._lock:
            self._metadata[cls] = metadata
        logger.debug(
            "metadata_extracted",
            target_class=cls.__name__,
            fields=metadata.field_names,
        )
        return metadata

    def has(self, cls: type) -> bool:
        """Check if metadata for cls is already cached."""
        return cls in self._metadata

    @property
    def types(self) -> list[type]:
        """Classes with cached metadata, in extraction order."""
        with self._lock:
            return list(self._metadata)

    def __len__(self) -> int:
        """Number of cached types."""
        return len(self._metadata)
