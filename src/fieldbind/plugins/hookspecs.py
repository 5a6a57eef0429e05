"""Pluggy hook specifications for fieldbind capability plugins.

A plugin contributes domain value types by returning capabilities from
``register_capabilities``. Plugins are discovered through the
``fieldbind.capabilities`` entry-point group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from fieldbind.domain.capabilities import TypeCapability

PROJECT_NAME = "fieldbind"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class FieldBindHookSpec:
    """Hook specifications for the fieldbind plugin system."""

    @hookspec
    def register_capabilities(self) -> list[TypeCapability] | None:
        """Return capabilities to add to the registry."""
