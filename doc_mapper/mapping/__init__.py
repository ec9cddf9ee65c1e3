"""Mapping layer - field declarations, shapes, metadata and reconstruction."""

from __future__ import annotations

from doc_mapper.mapping.builder import ReconstructionBuilder
from doc_mapper.mapping.element import Element
from doc_mapper.mapping.fields import (
    ArrayField,
    BooleanField,
    DateField,
    DocField,
    FieldDescriptor,
    MasterField,
    NumberField,
    ObjectField,
    ObjectIdField,
    SecondaryField,
    StringField,
)
from doc_mapper.mapping.metadata import (
    BuilderParam,
    BuilderSpec,
    TypeMetadata,
    builder,
    extract_metadata,
)
from doc_mapper.mapping.shapes import (
    classify,
    classify_value,
    infer_field_type,
    is_array,
    is_element,
    is_enum,
    is_map,
    is_primitive,
)

__all__ = [
    "DocField",
    "StringField",
    "NumberField",
    "BooleanField",
    "DateField",
    "ObjectIdField",
    "ObjectField",
    "ArrayField",
    "FieldDescriptor",
    "SecondaryField",
    "MasterField",
    "Element",
    "builder",
    "extract_metadata",
    "TypeMetadata",
    "BuilderSpec",
    "BuilderParam",
    "ReconstructionBuilder",
    "classify",
    "classify_value",
    "infer_field_type",
    "is_primitive",
    "is_element",
    "is_map",
    "is_enum",
    "is_array",
]
