"""The fixed catalog of test plugins bundled with the package.

To add a plugin, create its sources under ``resources/test-plugins/<dir>/`` and add an entry to
``DEFAULT_FIXTURES``. The plugin class ``test_plugins.thing.Thing`` belongs in
``resources/test-plugins/<dir>/test_plugins/thing.py``.
"""

from typing import List

from .data import Fixture

ALWAYS_THROW_EXCEPTION = "test_plugins.always_throw_exception.AlwaysThrowException"
"""Class name of a plugin which always raises an exception while its module is imported."""

SAMPLING = "test_plugins.sampling.Sampling"
"""Class name of a plugin which samples information about its initialization."""

SERVICE_LOADER = "test_plugins.service_loader.ServiceLoaderPlugin"
"""Class name of a plugin which samples information while loading its services."""

DEFAULT_FIXTURES: List[Fixture] = [
    Fixture(name=ALWAYS_THROW_EXCEPTION, resource_dir="always-throw-exception"),
    Fixture(name=SAMPLING, resource_dir="sampling"),
    Fixture(name=SERVICE_LOADER, resource_dir="service-loader"),
]
"""Fixtures built by the shared registry, in build order."""
