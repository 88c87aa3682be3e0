"""Base types implemented by the test plugins.

The test plugins are compiled against this module, so it has to be importable wherever the
plugins are built or loaded.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


def current_loader(module_name: str) -> Optional[Any]:
    """Get the loader of an imported module, or None if the module is not imported."""
    module = sys.modules.get(module_name)
    return getattr(module, "__loader__", None)


class Plugin(ABC):
    """A plugin that can be discovered and instantiated by name."""

    def version(self) -> str:
        return "1.0"


class SamplingPlugin(Plugin):
    """A plugin recording which loader was active at the points of its lifecycle."""

    @abstractmethod
    def static_loader(self) -> Optional[Any]:
        """The loader seen while the plugin module was imported."""
        ...

    @abstractmethod
    def loader(self) -> Optional[Any]:
        """The loader seen while the plugin was constructed."""
        ...

    def samples(self) -> Dict[str, Any]:
        """Other samples taken by the plugin, keyed by where they were taken."""
        return {}
