"""doc_mapper - annotation-driven object to BSON document mapping."""

from __future__ import annotations

from doc_mapper.core.config import MapperConfig
from doc_mapper.core.enums import FieldType, ValueShape
from doc_mapper.core.exceptions import (
    AccessError,
    DocMapperError,
    MappingError,
    MetadataError,
    MissingRequiredFieldError,
    NestingTooDeepError,
    UnsupportedShapeError,
)
from doc_mapper.core.mapper import DocumentMapper
from doc_mapper.core.registry import MetadataRegistry
from doc_mapper.mapping import (
    ArrayField,
    BooleanField,
    DateField,
    DocField,
    Element,
    NumberField,
    ObjectField,
    ObjectIdField,
    StringField,
    TypeMetadata,
    builder,
)

__all__ = [
    # Mapper
    "DocumentMapper",
    "MapperConfig",
    "MetadataRegistry",
    # Declarations
    "Element",
    "builder",
    "DocField",
    "StringField",
    "NumberField",
    "BooleanField",
    "DateField",
    "ObjectIdField",
    "ObjectField",
    "ArrayField",
    "TypeMetadata",
    # Enums
    "FieldType",
    "ValueShape",
    # Exceptions
    "DocMapperError",
    "MetadataError",
    "MappingError",
    "MissingRequiredFieldError",
    "UnsupportedShapeError",
    "NestingTooDeepError",
    "AccessError",
]
