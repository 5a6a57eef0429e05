"""Field descriptor: one editable member of a record or mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from fieldbind.domain.validate import validate_value

if TYPE_CHECKING:
    from fieldbind.domain.capabilities import CapabilityRegistry
    from fieldbind.domain.types import RenderHint

E = TypeVar("E")


@dataclass(eq=False)
class Field(Generic[E]):
    """Metadata and value of a single member.

    Attributes:
        name: Member name, unique within one extraction.
        name_display: Label to show next to the entry.
        type_tag: Tag selecting conversion, validation and rendering.
        value_str: Current value as an edit string.
        value: Current typed value.
        entry: Caller-owned handle (typically a widget), never read here.
        nullable: The member is declared optional; an empty edit string
            applies None.
    """

    name: str
    name_display: str
    type_tag: str
    value_str: str
    value: Any
    entry: E | None = None
    nullable: bool = False

    def validate(self, text: str, *, registry: CapabilityRegistry | None = None) -> None:
        """Check *text* for this field, raising :class:`ValidationError`.

        Runs the generic numeric check, then the domain check of the
        field's tag when *registry* is given. An empty string is valid for
        a nullable field.
        """
        if self.nullable and not text:
            return
        validate_value(self.type_tag, text, field_name=self.name)
        if registry is not None:
            registry.validate(self.type_tag, text, field_name=self.name)

    def render_hint(self, registry: CapabilityRegistry) -> tuple[RenderHint | None, bool]:
        return registry.render_hint(self.type_tag, self.value)

    def __repr__(self) -> str:
        return (
            f"Field(name={self.name!r}, type_tag={self.type_tag!r}, "
            f"value_str={self.value_str!r})"
        )
