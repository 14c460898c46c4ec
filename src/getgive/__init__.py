"""getgive package initialisation."""

from importlib import metadata

from .bootstrap import run, run_isolated
from .context import ExecutionContext
from .errors import (
    CircularDependencyError,
    LoaderError,
    ModuleSyntaxError,
    SourceNotFoundError,
    SourceReadError,
)
from .loader import ModuleLoader, create_loader


def _discover_version() -> str:
    """Return the installed package version, falling back to dev marker."""
    try:
        return metadata.version("getgive")
    except metadata.PackageNotFoundError:  # pragma: no cover - occurs in source checkouts
        return "0.0.0"


__all__ = [
    "CircularDependencyError",
    "ExecutionContext",
    "LoaderError",
    "ModuleLoader",
    "ModuleSyntaxError",
    "SourceNotFoundError",
    "SourceReadError",
    "__version__",
    "create_loader",
    "run",
    "run_isolated",
]
__version__ = _discover_version()
