"""Type tags for primitive kinds and annotation markers.

A type tag is the stable string discriminator that selects conversion,
validation and rendering behavior for a field. Primitive tags follow the
numeric width naming (``int8``, ``uint32``, ``float32`` ...) so records can
declare a width that plain Python ``int``/``float`` annotations cannot
express::

    @dataclass
    class Packet:
        ttl: Uint8
        ratio: Float32
        samples: list[Int16]
"""

from __future__ import annotations

import re
import types
import typing
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Annotated, Any

BOOL = "bool"
STRING = "string"
NULL = "null"
ANY = "any"
SEQUENCE_PREFIX = "[]"

# name -> (bits, signed)
INTEGER_WIDTHS: dict[str, tuple[int, bool]] = {
    "int": (64, True),
    "int8": (8, True),
    "int16": (16, True),
    "int32": (32, True),
    "int64": (64, True),
    "uint": (64, False),
    "uint8": (8, False),
    "uint16": (16, False),
    "uint32": (32, False),
    "uint64": (64, False),
}

FLOAT_WIDTHS: dict[str, int] = {
    "float32": 32,
    "float64": 64,
}

INTEGER_KINDS: frozenset[str] = frozenset(INTEGER_WIDTHS)
FLOAT_KINDS: frozenset[str] = frozenset(FLOAT_WIDTHS)
NUMERIC_KINDS: frozenset[str] = INTEGER_KINDS | FLOAT_KINDS

# Base-10 integer syntax, used with fullmatch. ``int()`` alone would also
# accept "1_000", " 7 " and "7\n".
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class TypeTag:
    """Annotation marker that pins the type tag of a member.

    Used inside ``Annotated``: ``Annotated[int, TypeTag("uint16")]``.
    """

    name: str


Int = Annotated[int, TypeTag("int")]
Int8 = Annotated[int, TypeTag("int8")]
Int16 = Annotated[int, TypeTag("int16")]
Int32 = Annotated[int, TypeTag("int32")]
Int64 = Annotated[int, TypeTag("int64")]
Uint = Annotated[int, TypeTag("uint")]
Uint8 = Annotated[int, TypeTag("uint8")]
Uint16 = Annotated[int, TypeTag("uint16")]
Uint32 = Annotated[int, TypeTag("uint32")]
Uint64 = Annotated[int, TypeTag("uint64")]
Float32 = Annotated[float, TypeTag("float32")]
Float64 = Annotated[float, TypeTag("float64")]

_PRIMITIVE_TAGS: dict[type, str] = {
    bool: BOOL,
    int: "int",
    float: "float64",
    str: STRING,
}


def is_integer(tag: str) -> bool:
    return tag in INTEGER_KINDS


def is_float(tag: str) -> bool:
    return tag in FLOAT_KINDS


def is_sequence(tag: str) -> bool:
    return tag.startswith(SEQUENCE_PREFIX)


def sequence_of(element_tag: str) -> str:
    """Build the sequence tag for *element_tag* (``int`` -> ``[]int``)."""
    return f"{SEQUENCE_PREFIX}{element_tag}"


def element_kind(tag: str) -> str:
    """Return the element tag of a sequence tag (``[]int`` -> ``int``)."""
    return tag[len(SEQUENCE_PREFIX) :]


def marker_tag(metadata: Iterable[Any]) -> str | None:
    """Return the name of the last :class:`TypeTag` in *metadata*, if any."""
    found: str | None = None
    for item in metadata:
        if isinstance(item, TypeTag):
            found = item.name
    return found


def tag_for_annotation(
    annotation: Any,
    domain_lookup: Callable[[type], str | None] | None = None,
) -> str | None:
    """Resolve the type tag of a declared annotation.

    Returns None when the annotation does not determine a tag, so the
    caller can fall back on the runtime value.
    """
    if typing.get_origin(annotation) is Annotated:
        base, *metadata = typing.get_args(annotation)
        tag = marker_tag(metadata)
        if tag is not None:
            return tag
        return tag_for_annotation(base, domain_lookup)

    origin = typing.get_origin(annotation)

    # X | None and Optional[X]
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return tag_for_annotation(args[0], domain_lookup)
        return None

    if annotation is list or origin is list:
        args = typing.get_args(annotation)
        if not args or args[0] is Any:
            return sequence_of(ANY)
        inner = tag_for_annotation(args[0], domain_lookup)
        if inner is None or (inner not in NUMERIC_KINDS and inner not in (BOOL, STRING)):
            return sequence_of(ANY)
        return sequence_of(inner)

    if isinstance(annotation, type):
        if domain_lookup is not None:
            domain = domain_lookup(annotation)
            if domain is not None:
                return domain
        # Exact match only: bool is an int subclass.
        return _PRIMITIVE_TAGS.get(annotation)

    return None


def allows_none(annotation: Any) -> bool:
    """True when *annotation* admits None (``X | None``, ``Optional[X]``)."""
    if typing.get_origin(annotation) is Annotated:
        return allows_none(typing.get_args(annotation)[0])
    if annotation is None or annotation is type(None):
        return True
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return any(allows_none(arg) for arg in typing.get_args(annotation))
    return False


def tag_for_value(
    value: Any,
    domain_lookup: Callable[[type], str | None] | None = None,
) -> str:
    """Resolve the type tag of a runtime value.

    Mapping members have no declaration, so this is the only source of
    their tag. Lists are always ``[]any``; the converter then restores
    ints and floats token by token.
    """
    if value is None:
        return NULL
    if domain_lookup is not None:
        domain = domain_lookup(type(value))
        if domain is not None:
            return domain
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float64"
    if isinstance(value, str):
        return STRING
    if isinstance(value, (list, tuple)):
        return sequence_of(ANY)
    return type(value).__name__
