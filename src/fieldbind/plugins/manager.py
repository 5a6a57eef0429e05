"""Plugin discovery and capability loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints
in the ``fieldbind.capabilities`` group, plus plugins registered directly.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable

import pluggy

from fieldbind.domain.capabilities import CapabilityRegistry, TypeCapability
from fieldbind.plugins.hookspecs import PROJECT_NAME, FieldBindHookSpec

ENTRY_POINT_GROUP = "fieldbind.capabilities"

logger = logging.getLogger(__name__)


class PluginManager:
    """Loads capability plugins into a :class:`CapabilityRegistry`.

    INVARIANT: Plugin failures are warnings, never errors. A broken plugin
    must not prevent the built-in types from working.
    """

    def __init__(self, registry: CapabilityRegistry) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FieldBindHookSpec)
        self._registry = registry
        self._loaded: bool = False

    def discover_and_load(self, *, disabled: Iterable[str] = ()) -> list[str]:
        """Load entry-point plugins and register their capabilities.

        Plugins whose name is in *disabled* are blocked before loading.
        Returns the names of all registered plugins.
        """
        for name in disabled:
            self._pm.set_blocked(name)
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        for plugin in self._pm.get_plugins():
            self._register_plugin_capabilities(plugin, self._plugin_name(plugin))
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        if self._pm.register(plugin, name=resolved_name) is None:
            logger.debug("Plugin %s is disabled, not registering", resolved_name)
            return
        if self._loaded:
            self._register_plugin_capabilities(plugin, resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def list_plugin_names(self) -> list[str]:
        return [self._plugin_name(p) for p in self._pm.get_plugins()]

    def _plugin_name(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or plugin.__class__.__name__

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    def _register_plugin_capabilities(self, plugin: object, plugin_name: str) -> None:
        """Register the capabilities exposed by a single plugin instance."""
        hook = getattr(plugin, "register_capabilities", None)
        if hook is None:
            return

        try:
            capabilities = hook()
        except Exception:
            logger.warning(
                "Failed to collect capabilities from plugin %s",
                plugin_name,
                exc_info=True,
            )
            return

        if capabilities is None:
            return
        if not isinstance(capabilities, (list, tuple)):
            logger.warning("Plugin %s returned non-list capability registrations", plugin_name)
            return

        for capability in capabilities:
            if not isinstance(capability, TypeCapability):
                logger.warning(
                    "Skipping %r from plugin %s: not a TypeCapability",
                    capability,
                    plugin_name,
                )
                continue
            try:
                self._registry.register(capability)
            except (RuntimeError, ValueError):
                logger.warning(
                    "Skipping capability %r from plugin %s",
                    capability.tag,
                    plugin_name,
                    exc_info=True,
                )
