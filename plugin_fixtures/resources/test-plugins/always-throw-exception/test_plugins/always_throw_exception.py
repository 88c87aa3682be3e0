"""Fake plugin class for testing plugin loading failures."""

from plugin_fixtures.plugin_api import Plugin


class AlwaysThrowException(Plugin):
    def version(self) -> str:
        raise RuntimeError("I always throw an exception")


raise RuntimeError("I always throw an exception")
