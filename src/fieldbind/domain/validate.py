"""Syntactic checks of edited strings, run by renderers before apply.

Only numeric kinds are checked here. Domain types add their own rules
through :meth:`CapabilityRegistry.validate`.
"""

from __future__ import annotations

from fieldbind.domain import kinds
from fieldbind.domain.convert import parse_float
from fieldbind.errors import ConversionError, ValidationError


def validate_value(type_tag: str, text: str, *, field_name: str = "") -> None:
    """Raise :class:`ValidationError` if *text* does not parse as *type_tag*.

    Integer kinds need a base-10 integer (the width is not checked here),
    float kinds need a float. Every other tag is valid.
    """
    if kinds.is_integer(type_tag):
        if not kinds.INTEGER_PATTERN.fullmatch(text):
            raise ValidationError(field_name, type_tag)
    elif kinds.is_float(type_tag):
        try:
            parse_float("float64", text)
        except ConversionError as exc:
            raise ValidationError(field_name, type_tag) from exc
