"""Type metadata extraction.

Reads the ``Annotated`` field markers and the ``@builder`` declaration of a
class and compiles them into a frozen TypeMetadata, validated once so that
conversions never meet an inconsistent declaration.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from operator import attrgetter
from typing import Annotated, Any, get_args, get_origin, get_type_hints

from doc_mapper.core.enums import ValueShape
from doc_mapper.core.exceptions import MetadataError
from doc_mapper.mapping.fields import DocField, FieldDescriptor
from doc_mapper.mapping.protocol import FieldOptions
from doc_mapper.mapping.shapes import classify, infer_field_type, unwrap

_BUILDER_ATTR = "__doc_mapper_builder__"


def builder(func: Any = None, /, **aliases: str) -> Any:
    """Declare the function that reconstructs instances of a mapped type.

    Applies to ``__init__``, a staticmethod or a classmethod. Parameters are
    matched to fields by document key or attribute name; keyword arguments
    alias a parameter to a document key explicitly::

        @builder(amount="liquid_amount")
        def __init__(self, liquid, capacity, amount): ...
    """

    def mark(target: Any) -> Any:
        raw = target.__func__ if isinstance(target, (staticmethod, classmethod)) else target
        setattr(raw, _BUILDER_ATTR, dict(aliases))
        return target

    if func is None:
        return mark
    return mark(func)


@dataclass(frozen=True)
class BuilderParam:
    """One argument of a builder, bound to the field that supplies it."""

    name: str
    field_name: str
    keyword_only: bool = False


@dataclass(frozen=True)
class BuilderSpec:
    """The declared reconstruction function and its argument order."""

    factory: Callable[..., Any]
    params: tuple[BuilderParam, ...]

    @property
    def field_names(self) -> frozenset[str]:
        return frozenset(p.field_name for p in self.params)

    def invoke(self, values: Mapping[str, Any]) -> Any:
        """Call the factory once, supplying None for absent values."""
        args = []
        kwargs = {}
        for param in self.params:
            value = values.get(param.field_name)
            if param.keyword_only:
                kwargs[param.name] = value
            else:
                args.append(value)
        return self.factory(*args, **kwargs)


@dataclass(frozen=True)
class TypeMetadata:
    """Compiled mapping of one type: its primary fields and builder.

    ``builder`` is None only for enumerations, which are reconstructed by
    member name.
    """

    target_class: type
    fields: tuple[FieldDescriptor, ...]
    builder: BuilderSpec | None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> FieldDescriptor:
        """Look up a primary field by document key."""
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)


def _marker_of(hint: Any) -> DocField | None:
    """Return the DocField attached to an Annotated hint, if any."""
    if get_origin(hint) is not Annotated:
        return None
    for extra in get_args(hint)[1:]:
        if isinstance(extra, DocField):
            return extra
    return None


def _extract_fields(
    cls: type,
    validator: Callable[[FieldOptions], bool] | None,
) -> tuple[FieldDescriptor, ...]:
    owner = cls.__name__
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        raise MetadataError(owner, f"cannot resolve annotations: {e}") from e

    fields: list[FieldDescriptor] = []
    seen: dict[str, str] = {}
    for attribute, hint in hints.items():
        marker = _marker_of(hint)
        if marker is None:
            continue

        name = marker.name or attribute
        if name in seen:
            raise MetadataError(
                owner, f"fields '{seen[name]}' and '{attribute}' share document key '{name}'"
            )
        seen[name] = attribute

        field_class = unwrap(hint)
        field_type = marker.field_type or infer_field_type(field_class)
        if field_type is None:
            raise MetadataError(owner, f"cannot infer a field type for '{attribute}'")

        descriptor = FieldDescriptor(
            name=name,
            attribute=attribute,
            field_type=field_type,
            field_class=field_class,
            shape=classify(field_class),
            owner=owner,
            required=marker.required,
            map_value_type=marker.map_value_type,
            element_type=marker.element_type,
            getter=attrgetter(attribute),
        )
        if validator is not None and not validator(descriptor):
            raise MetadataError(
                owner,
                f"field '{attribute}' of type {field_class!r} is not supported "
                f"as {field_type.value}",
            )
        fields.append(descriptor)
    return tuple(fields)


def _find_builder(cls: type) -> tuple[str, Any, dict[str, str]] | None:
    """Locate the single @builder declaration on the class itself."""
    found = []
    for attr_name, member in vars(cls).items():
        raw = member.__func__ if isinstance(member, (staticmethod, classmethod)) else member
        aliases = getattr(raw, _BUILDER_ATTR, None)
        if aliases is not None and callable(raw):
            found.append((attr_name, member, aliases))

    if len(found) > 1:
        names = ", ".join(name for name, *_ in found)
        raise MetadataError(cls.__name__, f"more than one builder declared ({names})")
    return found[0] if found else None


def _match_field(
    param_name: str,
    aliases: dict[str, str],
    fields: tuple[FieldDescriptor, ...],
) -> FieldDescriptor | None:
    wanted = aliases.get(param_name, param_name)
    for descriptor in fields:
        if descriptor.name == wanted:
            return descriptor
    if param_name in aliases:
        return None
    for descriptor in fields:
        if descriptor.attribute.lstrip("_") == param_name.lstrip("_"):
            return descriptor
    return None


def _compile_builder(
    cls: type,
    fields: tuple[FieldDescriptor, ...],
    check_param_shapes: bool,
) -> BuilderSpec:
    owner = cls.__name__
    declared = _find_builder(cls)
    if declared is None:
        raise MetadataError(owner, "no builder declared (use @builder)")
    attr_name, member, aliases = declared

    if isinstance(member, staticmethod):
        raw = member.__func__
        factory: Callable[..., Any] = raw
        skip_first = False
    elif isinstance(member, classmethod):
        raw = member.__func__
        factory = getattr(cls, attr_name)
        skip_first = True
    elif attr_name == "__init__":
        raw = member
        factory = cls
        skip_first = True
    else:
        raise MetadataError(
            owner,
            f"builder '{attr_name}' must be __init__, a staticmethod or a classmethod",
        )

    parameters = list(inspect.signature(raw).parameters.values())
    if skip_first:
        parameters = parameters[1:]

    try:
        hints = get_type_hints(raw)
    except (NameError, TypeError) as e:
        raise MetadataError(owner, f"cannot resolve builder annotations: {e}") from e

    unknown_aliases = set(aliases) - {p.name for p in parameters}
    if unknown_aliases:
        raise MetadataError(owner, f"builder aliases name no parameter: {sorted(unknown_aliases)}")

    params: list[BuilderParam] = []
    claimed: dict[str, str] = {}
    for param in parameters:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise MetadataError(owner, f"builder parameter '{param.name}' must not be variadic")

        descriptor = _match_field(param.name, aliases, fields)
        if descriptor is None:
            raise MetadataError(owner, f"builder parameter '{param.name}' matches no field")
        if descriptor.name in claimed:
            raise MetadataError(
                owner,
                f"builder parameters '{claimed[descriptor.name]}' and '{param.name}' "
                f"both bind field '{descriptor.name}'",
            )
        claimed[descriptor.name] = param.name

        if check_param_shapes and param.name in hints and hints[param.name] is not Any:
            param_shape = classify(hints[param.name])
            if param_shape is not descriptor.shape:
                raise MetadataError(
                    owner,
                    f"builder parameter '{param.name}' is {param_shape.value} but field "
                    f"'{descriptor.name}' is {descriptor.shape.value}",
                )

        params.append(
            BuilderParam(
                name=param.name,
                field_name=descriptor.name,
                keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
            )
        )
    return BuilderSpec(factory=factory, params=tuple(params))


def extract_metadata(
    cls: type,
    validator: Callable[[FieldOptions], bool] | None = None,
    *,
    check_param_shapes: bool = True,
) -> TypeMetadata:
    """Compile and validate the mapping declarations of a class.

    Args:
        cls: The mapped class.
        validator: Rejects fields no codec can handle (usually
                   DocumentMapper.is_valid_field).
        check_param_shapes: Compare builder parameter annotations with the
                            shapes of the fields they bind.

    Raises:
        MetadataError: On any inconsistent declaration.
    """
    if not isinstance(cls, type):
        raise MetadataError(repr(cls), "not a class")

    fields = _extract_fields(cls, validator)
    if classify(cls) is ValueShape.ENUM:
        return TypeMetadata(target_class=cls, fields=fields, builder=None)

    spec = _compile_builder(cls, fields, check_param_shapes)
    return TypeMetadata(target_class=cls, fields=fields, builder=spec)
