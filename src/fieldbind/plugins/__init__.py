"""Extension layer — capability plugins via pluggy.

Discovery: entry_points (pip-installed) in the ``fieldbind.capabilities``
group. INVARIANT: Plugin failures are warnings, never errors.
"""

from fieldbind.plugins.hookspecs import hookimpl
from fieldbind.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
