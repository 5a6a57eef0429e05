"""FieldCollection — ordered descriptors and the apply pass.

A collection is created by one extraction and consumed by one apply.
Apply calls the caller's ``per_field`` callback for every descriptor in
order. The callback returns ``(text, applied_flag)``:

- ``applied_flag=True``: *text* is converted (capability first, then the
  generic converter) and written into the target under ``field.name``.
- ``applied_flag=False``: the descriptor's stored value goes through the
  capability's domain setter and is written as is. Renderers use this for
  types they update without a string, such as a radio group selected by
  index.

An empty *text* for a nullable (``X | None``) field applies None.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable, Iterator, MutableMapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from fieldbind.binding.result import ApplyResult, FieldError, FieldErrorCode
from fieldbind.domain import kinds
from fieldbind.domain.capabilities import BUILTIN_REGISTRY, CapabilityRegistry
from fieldbind.domain.convert import ValueConverter
from fieldbind.domain.field import Field
from fieldbind.errors import (
    CollectionConsumedError,
    ConversionError,
    InvalidTargetKindError,
    UnsupportedTypeError,
)

E = TypeVar("E")

logger = logging.getLogger(__name__)

PerField = Callable[[Field[E]], tuple[str, bool]]

_MISSING = object()


class _Target:
    """Uniform read/write access to a record or mapping apply target."""

    def __init__(self, target: Any) -> None:
        self.target = target
        self.is_mapping = False
        self.members: frozenset[str] | None = None

        if isinstance(target, type):
            raise InvalidTargetKindError(target, "a class, not an instance")
        if dataclasses.is_dataclass(target):
            if type(target).__dataclass_params__.frozen:  # type: ignore[attr-defined]
                raise InvalidTargetKindError(target, "frozen dataclass")
            self.members = frozenset(f.name for f in dataclasses.fields(target))
        elif isinstance(target, BaseModel):
            if type(target).model_config.get("frozen"):
                raise InvalidTargetKindError(target, "frozen model")
            self.members = frozenset(type(target).model_fields)
        elif isinstance(target, MutableMapping):
            self.is_mapping = True
        else:
            raise InvalidTargetKindError(target)

    def read(self, name: str) -> Any:
        if self.is_mapping:
            return self.target.get(name, _MISSING)
        return getattr(self.target, name, _MISSING)

    def write(self, name: str, value: Any) -> None:
        if self.is_mapping:
            self.target[name] = value
            return
        if self.members is not None and name not in self.members:
            msg = f"{type(self.target).__name__} has no member {name!r}"
            raise AttributeError(msg)
        setattr(self.target, name, value)

    def restore(self, name: str, previous: Any) -> None:
        if previous is _MISSING:
            if self.is_mapping:
                self.target.pop(name, None)
            return
        if self.is_mapping:
            self.target[name] = previous
        elif isinstance(self.target, BaseModel):
            # Skip assignment validation: *previous* was accepted before.
            self.target.__dict__[name] = previous
        else:
            setattr(self.target, name, previous)


class FieldCollection(Generic[E]):
    """Ordered, fixed-membership sequence of :class:`Field` descriptors."""

    def __init__(
        self,
        fields: Iterable[Field[E]],
        *,
        registry: CapabilityRegistry | None = None,
    ) -> None:
        self._fields: tuple[Field[E], ...] = tuple(fields)
        self._by_name: dict[str, Field[E]] = {f.name: f for f in self._fields}
        self._registry = registry if registry is not None else BUILTIN_REGISTRY
        self._consumed = False

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Field[E]]:
        return iter(self._fields)

    def __getitem__(self, index: int) -> Field[E]:
        return self._fields[index]

    def __repr__(self) -> str:
        return f"FieldCollection({list(self.names())!r})"

    def names(self) -> list[str]:
        return [f.name for f in self._fields]

    def get(self, name: str) -> Field[E] | None:
        return self._by_name.get(name)

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    @property
    def consumed(self) -> bool:
        return self._consumed

    def apply(
        self,
        target: Any,
        per_field: PerField[E],
        *,
        converter: ValueConverter | None = None,
        atomic: bool = False,
    ) -> ApplyResult:
        """Write edited values into *target*.

        Args:
            target: The source record itself (written by reference), another
                writable record, or a mutable mapping.
            per_field: Returns ``(text, applied_flag)`` for each field.
            converter: Converter for non-domain tags; defaults to a strict
                converter over this collection's registry.
            atomic: Stage every value first and write nothing if any field
                fails. By default each field is applied independently.

        Raises:
            InvalidTargetKindError: *target* is not writable.
            CollectionConsumedError: the collection was already applied.
        """
        if self._consumed:
            msg = "Field collection was already applied; extract the record again"
            raise CollectionConsumedError(msg)
        writer = _Target(target)
        self._consumed = True

        if converter is None:
            converter = ValueConverter(self._registry)

        errors: list[FieldError] = []
        applied: list[str] = []
        staged: list[tuple[Field[E], Any]] = []

        for field in self._fields:
            text, is_str = per_field(field)
            try:
                value = self._value_for(field, text if is_str else None, converter)
            except UnsupportedTypeError as exc:
                errors.append(_field_error(field, FieldErrorCode.UNSUPPORTED_TYPE, exc, text))
                continue
            except ConversionError as exc:
                errors.append(_field_error(field, FieldErrorCode.CONVERSION, exc, text))
                continue

            if atomic:
                staged.append((field, value))
                continue
            try:
                writer.write(field.name, value)
            except (AttributeError, TypeError, ValueError) as exc:
                errors.append(_field_error(field, FieldErrorCode.ASSIGNMENT, exc, text))
                continue
            applied.append(field.name)

        rolled_back = False
        if atomic:
            if errors:
                rolled_back = True
            else:
                applied, assignment_errors = _write_all(writer, staged)
                if assignment_errors:
                    errors.extend(assignment_errors)
                    applied = []
                    rolled_back = True

        for error in errors:
            logger.debug("Field %s not applied: %s", error.field, error.message)
        logger.debug(
            "Applied %d of %d fields to %s",
            len(applied),
            len(self._fields),
            type(target).__name__,
        )
        return ApplyResult(
            ok=not errors,
            applied=applied,
            errors=errors,
            atomic=atomic,
            rolled_back=rolled_back,
        )

    def _value_for(self, field: Field[E], text: str | None, converter: ValueConverter) -> Any:
        capability = self._registry.get(field.type_tag)
        if text is None:
            if capability is None:
                return field.value
            return capability.domain_setter(field.value)
        if not text and _empty_means_none(field):
            return None
        if capability is not None:
            return capability.parse_string(field.value, text)
        return converter.convert(field.type_tag, text, current=field.value)


def _empty_means_none(field: Field[Any]) -> bool:
    # "" is a legitimate str value, so only a string that was None stays None.
    if not field.nullable:
        return False
    return field.type_tag != kinds.STRING or field.value is None


def _write_all(
    writer: _Target,
    staged: list[tuple[Field[Any], Any]],
) -> tuple[list[str], list[FieldError]]:
    """Write every staged value, undoing all of them on the first failure."""
    written: list[tuple[str, Any]] = []
    for field, value in staged:
        previous = writer.read(field.name)
        try:
            writer.write(field.name, value)
        except (AttributeError, TypeError, ValueError) as exc:
            for name, old in reversed(written):
                writer.restore(name, old)
            return [], [_field_error(field, FieldErrorCode.ASSIGNMENT, exc, None)]
        written.append((field.name, previous))
    return [name for name, _ in written], []


def _field_error(
    field: Field[Any],
    code: FieldErrorCode,
    exc: Exception,
    text: str | None,
) -> FieldError:
    return FieldError(
        field=field.name,
        type_tag=field.type_tag,
        code=code,
        message=str(exc),
        text=text,
    )
