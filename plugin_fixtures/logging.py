"""Logging helpers shared by the plugin-fixtures modules."""

from __future__ import annotations

import logging
from typing import Optional, Union

from .env import get_logging_level

_ROOT_LOGGER_NAME = "plugin_fixtures"
_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

_handler: Optional[logging.Handler] = None
"""The stream handler installed by ``configure_logging``."""


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the ``plugin_fixtures`` logger.

    Parameters
    ----------
    name : str
        The name of the child logger, e.g. ``"FixtureRegistry"``. Names already starting with
        ``plugin_fixtures`` are used as-is.

    Returns
    -------
    logging.Logger
        The logger.
    """
    if name == _ROOT_LOGGER_NAME or name.startswith(_ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Attach a stream handler to the ``plugin_fixtures`` logger.

    Calling this more than once only updates the level.

    Parameters
    ----------
    level : Optional[Union[int, str]]
        The logging level. Defaults to ``PLUGIN_FIXTURES_LOGGING_LEVEL``, or WARNING.

    Returns
    -------
    logging.Logger
        The configured ``plugin_fixtures`` logger.
    """
    global _handler
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(level if level is not None else get_logging_level())
    if _handler is None or _handler not in logger.handlers:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(_handler)
    return logger
