"""Value converter: edited strings back to typed values.

Resolution order for a type tag:

1. ``bool``: exact ``"true"``/``"false"``.
2. Integer kinds: base-10 parse, range-checked against the declared width.
3. Float kinds: double parse, narrowed to the declared width.
4. ``[]<kind>`` sequences of numbers or bools: bracketed, whitespace
   separated tokens.
5. ``string``: passthrough.
6. Anything else: the capability registry, or :class:`UnsupportedTypeError`.

Legacy mode keeps the historical leniency: integer overflow wraps to the
declared width, float32 overflow becomes infinity, and a bad token in a
sequence becomes zero. Strict mode (the default) raises on the first
parse error.
"""

from __future__ import annotations

import logging
import math
import struct
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from fieldbind.domain import kinds
from fieldbind.errors import ConversionError, UnsupportedTypeError

if TYPE_CHECKING:
    from fieldbind.domain.capabilities import CapabilityRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Number helpers
# ---------------------------------------------------------------------------


def _integer_bounds(kind: str) -> tuple[int, int]:
    bits, signed = kinds.INTEGER_WIDTHS[kind]
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def _wrap_integer(value: int, kind: str) -> int:
    """Truncate *value* to the width of *kind* (two's complement)."""
    bits, signed = kinds.INTEGER_WIDTHS[kind]
    value &= (1 << bits) - 1
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def narrow_float32(value: float) -> float:
    """Round *value* to the nearest IEEE single, raising OverflowError past its range."""
    if math.isinf(value) or math.isnan(value):
        return value
    return struct.unpack("<f", struct.pack("<f", value))[0]


def parse_integer(kind: str, text: str, *, legacy: bool = False) -> int:
    if not kinds.INTEGER_PATTERN.fullmatch(text):
        raise ConversionError(kind, text, reason="invalid syntax")
    value = int(text, 10)
    low, high = _integer_bounds(kind)
    if low <= value <= high:
        return value
    if legacy:
        wrapped = _wrap_integer(value, kind)
        logger.debug("Truncated %s to %s: %d -> %d", text, kind, value, wrapped)
        return wrapped
    raise ConversionError(kind, text, reason="value out of range")


def parse_float(kind: str, text: str, *, legacy: bool = False) -> float:
    if not text or "_" in text or text != text.strip():
        raise ConversionError(kind, text, reason="invalid syntax")
    try:
        value = float(text)
    except ValueError as exc:
        raise ConversionError(kind, text, reason="invalid syntax") from exc
    if kinds.FLOAT_WIDTHS[kind] == 64:
        return value
    try:
        return narrow_float32(value)
    except OverflowError as exc:
        if legacy:
            return math.copysign(math.inf, value)
        raise ConversionError(kind, text, reason="value out of range") from exc


def parse_number(kind: str, text: str, *, legacy: bool = False) -> int | float:
    """Parse *text* as a number of the numeric *kind*."""
    if kinds.is_integer(kind):
        return parse_integer(kind, text, legacy=legacy)
    if kinds.is_float(kind):
        return parse_float(kind, text, legacy=legacy)
    msg = f"can't convert type {kind} to number"
    raise TypeError(msg)


def _format_float(value: float, kind: str = "float64") -> str:
    if math.isinf(value) or math.isnan(value):
        return repr(value)
    if kind == "float32":
        # Shortest text that narrows back to the same single.
        for precision in range(1, 10):
            text = f"{value:.{precision}g}"
            if narrow_float32(float(text)) == value:
                break
    else:
        text = repr(value)
    if text.endswith(".0"):
        text = text[:-2]
    return text


def number_to_string(value: int | float, kind: str | None = None) -> str:
    """Render a number the way edit fields show it (``31.0`` -> ``"31"``)."""
    if isinstance(value, bool):
        return format_value(value)
    if isinstance(value, float):
        return _format_float(value, kind or "float64")
    return str(value)


def format_value(value: Any, kind: str | None = None) -> str:
    """Default stringification of a primitive value for its edit string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return number_to_string(value, kind)
    if isinstance(value, str):
        return value
    if isinstance(value, Sequence):
        element = kinds.element_kind(kind) if kind and kinds.is_sequence(kind) else None
        return "[" + " ".join(format_value(item, element) for item in value) + "]"
    return str(value)


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------


class ValueConverter:
    """String-to-value conversion for primitive and sequence kinds.

    Domain tags are delegated to *registry*; the converter holds no other
    state, so one instance can be shared freely.
    """

    def __init__(
        self,
        registry: CapabilityRegistry | None = None,
        *,
        legacy: bool = False,
    ) -> None:
        if registry is None:
            from fieldbind.domain.capabilities import BUILTIN_REGISTRY

            registry = BUILTIN_REGISTRY
        self.registry = registry
        self.legacy = legacy

    def convert(self, type_tag: str, text: str, *, current: Any = None) -> Any:
        """Convert *text* to a value of *type_tag*.

        *current* is the field's present value; domain capabilities use it
        as a template (a radio group keeps its options, for example).
        """
        scalar = self._convert_scalar(type_tag, text)
        if scalar is not _UNHANDLED:
            return scalar

        if kinds.is_sequence(type_tag):
            return self._convert_sequence(type_tag, text)

        capability = self.registry.get(type_tag)
        if capability is None:
            raise UnsupportedTypeError(type_tag, text)
        return capability.parse_string(current, text)

    def _convert_scalar(self, type_tag: str, text: str) -> Any:
        if type_tag == kinds.BOOL:
            if text == "true":
                return True
            if text == "false":
                return False
            raise ConversionError(type_tag, text, reason="expected 'true' or 'false'")
        if kinds.is_integer(type_tag):
            return parse_integer(type_tag, text, legacy=self.legacy)
        if kinds.is_float(type_tag):
            return parse_float(type_tag, text, legacy=self.legacy)
        if type_tag == kinds.STRING:
            return text
        return _UNHANDLED

    def _convert_sequence(self, type_tag: str, text: str) -> list[Any]:
        element = kinds.element_kind(type_tag)
        # Tokens are whitespace separated: string items are not representable.
        if element not in kinds.NUMERIC_KINDS and element not in (kinds.ANY, kinds.BOOL):
            raise UnsupportedTypeError(type_tag, text)

        body = text.strip().strip("[]")
        items: list[Any] = []
        for token in body.split():
            try:
                items.append(self._convert_element(element, token))
            except ConversionError as exc:
                if not self.legacy:
                    raise ConversionError(type_tag, text, reason=str(exc)) from exc
                logger.debug("Replaced bad token %r in %s with zero", token, type_tag)
                items.append(_zero(element))
        return items

    def _convert_element(self, element: str, token: str) -> Any:
        if element == kinds.ANY:
            if kinds.INTEGER_PATTERN.fullmatch(token):
                return int(token, 10)
            return parse_float("float64", token)
        return self._convert_scalar(element, token)


_UNHANDLED = object()


def _zero(element: str) -> Any:
    if kinds.is_float(element):
        return 0.0
    if element == kinds.BOOL:
        return False
    return 0


def convert_value(
    type_tag: str,
    text: str,
    *,
    registry: CapabilityRegistry | None = None,
    legacy: bool = False,
    current: Any = None,
) -> Any:
    """Convert *text* to a value of *type_tag* (see :class:`ValueConverter`)."""
    return ValueConverter(registry, legacy=legacy).convert(type_tag, text, current=current)
