"""Testing utilities for plugin-fixtures."""

from .pytest_plugin import built_test_plugins

__all__ = ["built_test_plugins"]
