"""Entry points that start a run from a path on the command line."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from .context import ExecutionContext
from .loader import ModuleLoader, compile_script, read_source, resolve_path
from .types import PathArg

LOGGER = logging.getLogger(__name__)

# The entry module has no real parent, so it gets a synthetic one inside the
# working directory.
ROOT_PARENT_NAME = "__main__"


def root_parent(cwd: PathArg | None = None) -> Path:
    """Return the synthetic parent path used to resolve the entry module."""

    base = Path(cwd) if cwd is not None else Path.cwd()
    return Path(os.path.abspath(base)) / ROOT_PARENT_NAME


def run(
    entry: PathArg,
    *,
    context: ExecutionContext | None = None,
    cwd: PathArg | None = None,
) -> Any:
    """Load ``entry`` relative to the working directory and return its result."""

    context = context if context is not None else ExecutionContext()
    parent = root_parent(cwd)
    LOGGER.debug("Starting run of %s from %s", entry, parent.parent)
    get = ModuleLoader(context).getter(parent)
    result = get(entry)
    LOGGER.debug("Run of %s finished after %d module load(s)", entry, context.loads)
    return result


def run_isolated(
    entry: PathArg,
    *,
    context: ExecutionContext | None = None,
    cwd: PathArg | None = None,
) -> None:
    """Execute ``entry`` in a private scope without ``get`` or ``give``."""

    context = context if context is not None else ExecutionContext()
    path = resolve_path(entry, root_parent(cwd))
    module = read_source(path, context.encoding)
    script = compile_script(module, context.namespace)
    context.loads += 1
    LOGGER.debug("Running isolated script %s", path)
    script()


__all__ = ["ROOT_PARENT_NAME", "root_parent", "run", "run_isolated"]
