"""Rich/JSON renderings of field collections and apply results.

Used for debugging bindings: a human table (Rich) or machine JSON of the
descriptors a record produced, and a summary of what an apply wrote.
Secrets are masked in both modes. Names, labels and values come from
user data and are never interpreted as Rich markup.
"""

from __future__ import annotations

import json as _json
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from fieldbind.domain.capabilities import BUILTIN_REGISTRY, PASSWORD, CapabilityRegistry
from fieldbind.output.console import create_console, get_output, style_for_tag

if TYPE_CHECKING:
    from rich.console import Console

    from fieldbind.binding.result import ApplyResult
    from fieldbind.domain.field import Field

MASK = "********"


def _display_value(field: Field[Any]) -> str:
    if field.type_tag == PASSWORD and field.value_str:
        return MASK
    return field.value_str


def format_fields(
    fields: Iterable[Field[Any]],
    *,
    json_output: bool = False,
    registry: CapabilityRegistry | None = None,
    no_color: bool = False,
    width: int | None = None,
) -> str:
    """Render descriptors as a table (default) or a JSON list."""
    registry = registry if registry is not None else BUILTIN_REGISTRY
    if json_output:
        rows = [
            {
                "name": f.name,
                "name_display": f.name_display,
                "type_tag": f.type_tag,
                "value_str": _display_value(f),
            }
            for f in fields
        ]
        return _json.dumps(rows, indent=2)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", style="fb.name")
    table.add_column("Label", style="fb.label")
    table.add_column("Type")
    table.add_column("Value")
    for f in fields:
        table.add_row(
            Text(f.name),
            Text(f.name_display),
            Text(f.type_tag, style=style_for_tag(f.type_tag, registry)),
            Text(_display_value(f)),
        )

    console = create_console(no_color=no_color, width=width)
    console.print(table)
    return get_output(console)


def _status_line(console: Console, result: ApplyResult) -> None:
    if result.ok:
        line = Text("OK", style="fb.ok")
        line.append(f": {result.op}", style="fb.op")
        line.append(f" ({len(result.applied)} fields)")
    else:
        line = Text("ERROR", style="fb.error")
        line.append(f": {result.op}", style="fb.op")
        line.append(f" — {len(result.errors)} field(s) failed")
    console.print(line)


def format_apply_result(
    result: ApplyResult,
    *,
    json_output: bool = False,
    no_color: bool = False,
    width: int | None = None,
) -> str:
    """Render an apply outcome as styled text or JSON."""
    if json_output:
        return result.model_dump_json(indent=2)

    console = create_console(no_color=no_color, width=width)
    _status_line(console, result)
    if result.rolled_back:
        console.print(Text("  nothing written (atomic)", style="fb.label"))
    for error in result.errors:
        line = Text(f"  {error.field}", style="fb.name")
        line.append(f" [{error.type_tag}] ")
        line.append(str(error.code), style="fb.code")
        line.append(f": {error.message}")
        console.print(line, soft_wrap=True)
    return get_output(console).rstrip("\n")
