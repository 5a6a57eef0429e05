"""Settings sections with code-baked defaults.

Sparse TOML contract: defaults baked here, fieldbind.toml only contains
overrides. An empty file (or none at all) gives strict conversion and
independent per-field apply.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ConvertConfig(BaseModel):
    """[convert] section."""

    model_config = {"frozen": True}

    # Wrap integer overflow and zero out bad sequence tokens instead of failing.
    legacy_numeric: bool = False


class ApplyConfig(BaseModel):
    """[apply] section."""

    model_config = {"frozen": True}

    atomic: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    disabled: list[str] = Field(default_factory=list)
