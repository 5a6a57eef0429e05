"""Exception hierarchy for fieldbind.

Shape errors (:class:`InvalidInputKindError`, :class:`InvalidTargetKindError`,
:class:`CollectionConsumedError`) are integrator misuse and always propagate.
Per-field errors (:class:`ConversionError`, :class:`UnsupportedTypeError`)
are collected into an :class:`~fieldbind.binding.result.ApplyResult`
during apply and never abort the remaining fields.
"""

from __future__ import annotations


class FieldBindError(Exception):
    """Base class for all fieldbind errors."""


class ConfigError(FieldBindError):
    """A config file could not be read."""


class InvalidInputKindError(FieldBindError, TypeError):
    """Extraction source is not a record or a string-keyed mapping."""

    def __init__(self, obj: object) -> None:
        self.kind = type(obj).__name__
        super().__init__(
            f"extract source should be a dataclass, a pydantic model or a "
            f"string-keyed mapping, got {self.kind}"
        )


class InvalidTargetKindError(FieldBindError, TypeError):
    """Apply target is not a writable record or mutable mapping."""

    def __init__(self, obj: object, reason: str | None = None) -> None:
        self.kind = type(obj).__name__
        msg = (
            f"apply target should be a writable dataclass, pydantic model "
            f"or mutable mapping, got {self.kind}"
        )
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class CollectionConsumedError(FieldBindError, RuntimeError):
    """A field collection was applied more than once."""


class ConversionError(FieldBindError, ValueError):
    """A string could not be converted to the value of a type tag."""

    def __init__(self, type_tag: str, text: str, reason: str | None = None) -> None:
        self.type_tag = type_tag
        self.text = text
        msg = f"can't convert {text!r} to {type_tag}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class UnsupportedTypeError(ConversionError):
    """No converter or capability exists for a type tag."""

    def __init__(self, type_tag: str, text: str = "") -> None:
        super().__init__(type_tag, text, reason="unsupported type")


class ValidationError(FieldBindError, ValueError):
    """Syntactic check of an edited string failed."""

    def __init__(self, field: str, expected_type: str, message: str | None = None) -> None:
        self.field = field
        self.expected_type = expected_type
        super().__init__(message or f"type of {field} value should be {expected_type}")
