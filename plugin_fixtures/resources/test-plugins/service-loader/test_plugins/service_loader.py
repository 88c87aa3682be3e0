"""Plugin discovering its services from the entry points packaged next to it."""

from importlib.metadata import distributions
from pathlib import Path

from plugin_fixtures.plugin_api import SamplingPlugin, current_loader

from test_plugins.service_loaded import ServiceLoadedClass

SERVICE_GROUP = "test_plugins.services"

_STATIC_LOADER = current_loader(__name__)


def _archive_root():
    # test_plugins/service_loader.pyc -> archive (or source tree) root
    return str(Path(__file__).parents[1])


class ServiceLoaderPlugin(SamplingPlugin):
    def __init__(self):
        self._loader = current_loader(__name__)
        self._samples = {}
        for dist in distributions(path=[_archive_root()]):
            for entry_point in dist.entry_points:
                if entry_point.group != SERVICE_GROUP:
                    continue
                service = entry_point.load()
                if not issubclass(service, ServiceLoadedClass):
                    raise TypeError(f"{entry_point.value} is not a ServiceLoadedClass")
                instance = service()
                self._samples[entry_point.name] = instance.samples()

    def static_loader(self):
        return _STATIC_LOADER

    def loader(self):
        return self._loader

    def samples(self):
        return dict(self._samples)
