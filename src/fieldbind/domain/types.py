"""Domain value types with their own edit semantics.

Each type exposes the same small contract used by the capability
registry:

- ``get_value()``: canonical string form shown in an edit field.
- ``set_value(text)``: returns an updated copy (the original is untouched).
- ``new_render_hint()``: ``(RenderHint, hint_available)`` for renderers.

The models mirror their persisted JSON shape, so a decoded document can
be validated straight into them.
"""

from __future__ import annotations

import logging
import re
from typing import Self

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

NO_SELECTION = -1

EMAIL_PATTERN = re.compile(r"\w+@\w+\.\w{1,4}")
EMAIL_PATTERN_MESSAGE = "not a valid email"
EMAIL_PLACEHOLDER = "test@example.com"


class RenderHint(BaseModel):
    """Widget hint handed to renderers. The core never reads it."""

    model_config = {"frozen": True}

    widget: str
    text: str = ""
    placeholder: str | None = None
    pattern: str | None = None
    pattern_message: str | None = None
    rows: int | None = None
    masked: bool = False
    options: list[str] = Field(default_factory=list)
    horizontal: bool = False
    selected: str = ""


class Email(str):
    """E-mail address stored as a plain string."""

    __slots__ = ()

    def get_value(self) -> str:
        return str(self)

    def set_value(self, val: str) -> Email:
        return Email(val)

    def new_render_hint(self) -> tuple[RenderHint, bool]:
        hint = RenderHint(
            widget="entry",
            text=self.get_value(),
            placeholder=EMAIL_PLACEHOLDER,
            pattern=EMAIL_PATTERN.pattern,
            pattern_message=EMAIL_PATTERN_MESSAGE,
        )
        return hint, True


class Password(BaseModel):
    """Secret text; ``visible`` asks renderers to show it unmasked."""

    value: str = ""
    visible: bool = False

    def get_value(self) -> str:
        return self.value

    def set_value(self, val: str) -> Self:
        return self.model_copy(update={"value": val})

    def new_render_hint(self) -> tuple[RenderHint, bool]:
        hint = RenderHint(widget="password", text=self.value, masked=not self.visible)
        return hint, True


class Multiline(BaseModel):
    """Multi-line text with a preferred number of visible rows."""

    value: str = ""
    multiline_rows: int = 3

    def get_value(self) -> str:
        return self.value

    def get_num_rows(self) -> int:
        """Number of rows visible without scrolling."""
        return self.multiline_rows

    def set_value(self, val: str) -> Self:
        return self.model_copy(update={"value": val})

    def set_num_rows(self, num: int) -> None:
        self.multiline_rows = num

    def new_render_hint(self) -> tuple[RenderHint, bool]:
        hint = RenderHint(widget="multiline", text=self.value, rows=self.multiline_rows)
        # Multi-line entries carry no hint text line under the widget.
        return hint, False


class RadioGroup(BaseModel):
    """Single-choice group over an ordered, non-empty list of labels.

    ``selected`` is an index into ``options`` or :data:`NO_SELECTION`.
    """

    options: list[str] = Field(min_length=1)
    horizontal: bool = False
    selected: int = NO_SELECTION

    def get_options(self) -> list[str]:
        return self.options

    def get_horizontal(self) -> bool:
        return self.horizontal

    def selected_index(self) -> int:
        return self.selected

    def selected_label(self) -> str:
        """Label of the selected option, or ``""`` when nothing valid is selected."""
        if 0 <= self.selected < len(self.options):
            return self.options[self.selected]
        return ""

    def set_selected(self, label: str) -> None:
        """Select the first option equal to *label*.

        An unknown label clears the selection to :data:`NO_SELECTION`
        rather than raising.
        """
        try:
            self.selected = self.options.index(label)
        except ValueError:
            logger.debug("Label %r not in options %r, clearing selection", label, self.options)
            self.selected = NO_SELECTION

    def get_value(self) -> str:
        return self.selected_label()

    def set_value(self, val: str) -> Self:
        updated = self.model_copy(deep=True)
        updated.set_selected(val)
        return updated

    def new_render_hint(self) -> tuple[RenderHint, bool]:
        hint = RenderHint(
            widget="radio",
            options=list(self.options),
            horizontal=self.horizontal,
            selected=self.selected_label(),
        )
        return hint, True
