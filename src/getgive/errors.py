"""Exceptions raised while loading getgive modules."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class LoaderError(RuntimeError):
    """Base class for failures raised by the loader itself."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class SourceReadError(LoaderError):
    """Raised when a module file exists but cannot be read as text."""


class SourceNotFoundError(SourceReadError):
    """Raised when a requested module path does not exist."""


class ModuleSyntaxError(LoaderError):
    """Raised when module source cannot be compiled as a function body."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        lineno: int | None = None,
        offset: int | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.lineno = lineno
        self.offset = offset


class CircularDependencyError(LoaderError):
    """Raised when cycle detection is enabled and a path is requested again."""

    def __init__(self, chain: Sequence[Path]) -> None:
        self.chain = list(chain)
        rendered = " -> ".join(str(item) for item in self.chain)
        super().__init__(f"Circular dependency: {rendered}", path=self.chain[-1])


__all__ = [
    "CircularDependencyError",
    "LoaderError",
    "ModuleSyntaxError",
    "SourceNotFoundError",
    "SourceReadError",
]
