"""Persisted element base class."""

from __future__ import annotations

from typing import Annotated, Any

from bson import ObjectId

from doc_mapper.mapping.fields import ObjectIdField


class Element:
    """An object stored as its own top-level document.

    Every instance is assigned a fresh ObjectId when created. The id is
    mapped to the ``_id`` document key; embedded in another object an
    element is stored as a reference (its id only).
    """

    _id: Annotated[ObjectId, ObjectIdField("_id")]

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:
        instance = super().__new__(cls)
        object.__setattr__(instance, "_id", ObjectId())
        return instance

    @property
    def id(self) -> ObjectId:
        return self._id
