"""Errors raised by the fixture build steps."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class FixtureBuildError(RuntimeError):
    """Raised when a fixture cannot be turned into an archive."""


class ResourceNotFound(FixtureBuildError):
    """The fixture resource directory is not present on the resource search path."""


class NotADirectory(FixtureBuildError):
    """The fixture resource exists but is not a directory."""


class NotReadable(FixtureBuildError):
    """The fixture resource directory cannot be read by this process."""


class CleanupFailed(FixtureBuildError):
    """A stale compiled file could not be removed before recompiling."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class CompilationFailed(FixtureBuildError):
    """The compiler reported at least one error. ``diagnostics`` holds the full compiler output."""

    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(message)
        self.diagnostics = diagnostics


class ArchiveWriteFailed(FixtureBuildError):
    """The archive could not be written. The partial archive must not be used."""
