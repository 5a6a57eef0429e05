"""Field extraction from records and mappings.

Accepted sources:

- dataclass instances, members in declaration order;
- pydantic model instances, members in ``model_fields`` order;
- string-keyed mappings, members in iteration (insertion) order.

Record members whose name starts with ``_`` are private and skipped;
mapping keys are data and are all kept. Nested records are not
traversed; a nested member is extracted as one field tagged with its
class name. Members declared ``X | None`` are marked nullable.
"""

from __future__ import annotations

import dataclasses
import logging
import typing
from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from fieldbind.binding.collection import FieldCollection
from fieldbind.domain import kinds
from fieldbind.domain.capabilities import BUILTIN_REGISTRY, CapabilityRegistry
from fieldbind.domain.convert import format_value
from fieldbind.domain.field import Field
from fieldbind.errors import InvalidInputKindError

E = TypeVar("E")

logger = logging.getLogger(__name__)

# (name, display, type_tag, value, nullable)
_Member = tuple[str, str, str, Any, bool]


def display_name(name: str) -> str:
    """Label for *name*: the name with its first character upper-cased."""
    return name[:1].upper() + name[1:]


def extract_fields(
    record: Any,
    on_field: Callable[[Field[E]], None] | None = None,
    *,
    registry: CapabilityRegistry | None = None,
) -> FieldCollection[E]:
    """Build the field collection of *record*.

    *on_field* is called once per field, in discovery order, before this
    function returns; it typically creates an entry widget and stores it
    in ``field.entry``.

    Raises:
        InvalidInputKindError: *record* is not a dataclass instance,
            pydantic model instance or string-keyed mapping.
    """
    registry = registry if registry is not None else BUILTIN_REGISTRY
    members = _members(record, registry)

    fields: list[Field[E]] = []
    for name, display, type_tag, value, nullable in members:
        field: Field[E] = Field(
            name=name,
            name_display=display,
            type_tag=type_tag,
            value_str=_value_str(type_tag, value, registry),
            value=value,
            nullable=nullable,
        )
        fields.append(field)
        if on_field is not None:
            on_field(field)
        logger.debug("%s: %r of type %s", field.name, field.value, field.type_tag)

    return FieldCollection(fields, registry=registry)


def _value_str(type_tag: str, value: Any, registry: CapabilityRegistry) -> str:
    if type_tag in registry:
        return registry.to_string(type_tag, value)
    return format_value(value, type_tag)


def _members(record: Any, registry: CapabilityRegistry) -> Iterator[_Member]:
    if isinstance(record, type):
        raise InvalidInputKindError(record)
    if dataclasses.is_dataclass(record):
        return _dataclass_members(record, registry)
    if isinstance(record, BaseModel):
        return _model_members(record, registry)
    if isinstance(record, Mapping):
        bad = [key for key in record if not isinstance(key, str)]
        if bad:
            raise InvalidInputKindError(record)
        return _mapping_members(record, registry)
    raise InvalidInputKindError(record)


def _resolve_tag(annotation: Any, value: Any, registry: CapabilityRegistry) -> str:
    tag = None
    if annotation is not None:
        tag = kinds.tag_for_annotation(annotation, registry.tag_for_type)
    if tag is None:
        tag = kinds.tag_for_value(value, registry.tag_for_type)
    return tag


def _dataclass_members(record: Any, registry: CapabilityRegistry) -> Iterator[_Member]:
    try:
        hints = typing.get_type_hints(type(record), include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back on runtime values.
        logger.debug("Could not resolve annotations of %s", type(record).__name__, exc_info=True)
        hints = {}

    for member in dataclasses.fields(record):
        if member.name.startswith("_"):
            continue
        value = getattr(record, member.name)
        annotation = hints.get(member.name)
        tag = _resolve_tag(annotation, value, registry)
        label = member.metadata.get("label") or display_name(member.name)
        nullable = annotation is not None and kinds.allows_none(annotation)
        yield member.name, label, tag, value, nullable


def _model_members(record: BaseModel, registry: CapabilityRegistry) -> Iterator[_Member]:
    for name, info in type(record).model_fields.items():
        if name.startswith("_"):
            continue
        value = getattr(record, name)
        tag = kinds.marker_tag(info.metadata)
        if tag is None:
            tag = _resolve_tag(info.annotation, value, registry)
        nullable = kinds.allows_none(info.annotation)
        yield name, info.title or display_name(name), tag, value, nullable


def _mapping_members(record: Mapping[str, Any], registry: CapabilityRegistry) -> Iterator[_Member]:
    for key, value in record.items():
        tag = kinds.tag_for_value(value, registry.tag_for_type)
        yield key, display_name(key), tag, value, False
