"""Service implementation discovered through entry points."""

from plugin_fixtures.plugin_api import current_loader

_STATIC_LOADER = current_loader(__name__)


class ServiceLoadedClass:
    def __init__(self):
        self._loader = current_loader(__name__)

    def samples(self):
        return {"static": _STATIC_LOADER, "instance": self._loader}
