"""Sampling plugin recording the loader active during its lifecycle."""

from plugin_fixtures.plugin_api import SamplingPlugin, current_loader

_STATIC_LOADER = current_loader(__name__)


class Sampling(SamplingPlugin):
    def __init__(self):
        self._loader = current_loader(__name__)
        self._samples = {}

    def static_loader(self):
        return _STATIC_LOADER

    def loader(self):
        return self._loader

    def configure(self, options):
        self._samples["configure"] = current_loader(__name__)

    def samples(self):
        return dict(self._samples)
