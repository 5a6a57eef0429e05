"""Binder — one configured entry point for extract, convert and apply.

The free functions (:func:`extract_fields`, :func:`convert_value`, ...)
take every piece of context explicitly. A Binder resolves that context
once, from :class:`FieldBindSettings`, and reuses it:

    binder = Binder.from_settings()
    fields = binder.extract(person, attach_entry)
    ...
    result = binder.apply(fields, person, read_entry)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from fieldbind.binding.collection import FieldCollection, PerField
from fieldbind.binding.extract import extract_fields
from fieldbind.binding.result import ApplyResult
from fieldbind.domain.capabilities import BUILTIN_REGISTRY, CapabilityRegistry, builtin_registry
from fieldbind.domain.convert import ValueConverter
from fieldbind.domain.field import Field
from fieldbind.domain.validate import validate_value

if TYPE_CHECKING:
    from fieldbind.config.settings import FieldBindSettings

E = TypeVar("E")

logger = logging.getLogger(__name__)


class Binder:
    """Registry, converter mode and apply mode bundled together."""

    def __init__(
        self,
        registry: CapabilityRegistry | None = None,
        *,
        legacy_numeric: bool = False,
        atomic: bool = False,
    ) -> None:
        self.registry = registry if registry is not None else BUILTIN_REGISTRY
        self.converter = ValueConverter(self.registry, legacy=legacy_numeric)
        self.atomic = atomic

    @classmethod
    def from_settings(
        cls,
        settings: FieldBindSettings | None = None,
        *,
        setup_logging: bool = False,
    ) -> Binder:
        """Build a Binder from settings (loaded from env/TOML when omitted).

        When plugins are enabled, entry-point capabilities are loaded into a
        fresh registry, which is then frozen.
        """
        from fieldbind.config.settings import FieldBindSettings

        if settings is None:
            settings = FieldBindSettings.load()
        if setup_logging:
            from fieldbind.config.logging import configure_logging

            configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        registry = builtin_registry()
        if settings.plugins.enabled:
            from fieldbind.plugins.manager import PluginManager

            names = PluginManager(registry).discover_and_load(disabled=settings.plugins.disabled)
            logger.debug("Loaded capability plugins: %s", names)
        registry.freeze()

        return cls(
            registry,
            legacy_numeric=settings.convert.legacy_numeric,
            atomic=settings.apply.atomic,
        )

    @property
    def legacy_numeric(self) -> bool:
        return self.converter.legacy

    def extract(
        self,
        record: Any,
        on_field: Callable[[Field[E]], None] | None = None,
    ) -> FieldCollection[E]:
        return extract_fields(record, on_field, registry=self.registry)

    def apply(
        self,
        fields: FieldCollection[E],
        target: Any,
        per_field: PerField[E],
        *,
        atomic: bool | None = None,
    ) -> ApplyResult:
        return fields.apply(
            target,
            per_field,
            converter=self.converter,
            atomic=self.atomic if atomic is None else atomic,
        )

    def convert(self, type_tag: str, text: str, *, current: Any = None) -> Any:
        return self.converter.convert(type_tag, text, current=current)

    def validate(self, type_tag: str, text: str, *, field_name: str = "") -> None:
        """Generic check, then the domain check of *type_tag* if registered."""
        validate_value(type_tag, text, field_name=field_name)
        self.registry.validate(type_tag, text, field_name=field_name)
