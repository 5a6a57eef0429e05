"""Rich Console factory, theme and tag styles for fieldbind output.

Consoles render into a StringIO buffer so formatters can keep returning
plain strings. Rich drops color codes on its own when the output is not
a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

from fieldbind.domain import kinds
from fieldbind.domain.capabilities import CapabilityRegistry

FB_THEME = Theme(
    {
        "fb.ok": "bold green",
        "fb.error": "bold red",
        "fb.op": "bold cyan",
        "fb.name": "bold",
        "fb.label": "dim",
        "fb.code": "yellow",
        "fb.tag.primitive": "cyan",
        "fb.tag.sequence": "blue",
        "fb.tag.domain": "magenta",
        "fb.tag.unknown": "yellow",
    }
)

_PRIMITIVE_TAGS = kinds.NUMERIC_KINDS | {kinds.BOOL, kinds.STRING, kinds.NULL}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing to a StringIO buffer, 120 columns unless *width* is given."""
    return Console(
        file=StringIO(),
        theme=FB_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_tag(type_tag: str, registry: CapabilityRegistry) -> str:
    """Theme style for a type tag: primitive, sequence, domain or unknown."""
    if type_tag in _PRIMITIVE_TAGS:
        return "fb.tag.primitive"
    if kinds.is_sequence(type_tag):
        return "fb.tag.sequence"
    if type_tag in registry:
        return "fb.tag.domain"
    return "fb.tag.unknown"
