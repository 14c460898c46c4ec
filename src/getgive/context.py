"""Per-run execution environment shared by every loaded module."""

from __future__ import annotations

import builtins
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from getgive.config import LoaderConfig

LOGGER = logging.getLogger(__name__)
NAMESPACE_NAME = "__getgive__"
RESERVED_NAMES = frozenset({"__builtins__", "__name__"})


class ExecutionContext:
    """Globals namespace and bookkeeping for one run of the loader.

    Every wrapped module function is evaluated against ``namespace``, so a
    binding published with a ``global`` statement in one module is visible to
    all modules evaluated afterwards. Runs that must not interfere need
    separate contexts.
    """

    def __init__(
        self,
        *,
        encoding: str = "utf-8",
        cache: bool = False,
        detect_cycles: bool = False,
        shared: Mapping[str, Any] | None = None,
    ) -> None:
        self.encoding = encoding
        self.cache_enabled = cache
        self.detect_cycles = detect_cycles
        self.namespace: dict[str, Any] = {
            "__builtins__": builtins,
            "__name__": NAMESPACE_NAME,
        }
        self.loads = 0
        # Absolute paths of the modules currently executing, outermost first.
        self.stack: list[Path] = []
        self._results: dict[Path, Any] = {}
        for name, value in (shared or {}).items():
            self.declare(name, value)

    @classmethod
    def from_config(
        cls,
        config: LoaderConfig,
        shared: Mapping[str, Any] | None = None,
    ) -> ExecutionContext:
        """Build a context from the ``loader`` configuration section."""

        return cls(
            encoding=config.encoding,
            cache=config.cache,
            detect_cycles=config.detect_cycles,
            shared=shared,
        )

    def declare(self, name: str, value: Any) -> None:
        """Publish ``value`` as a global visible to every module."""

        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"Shared global name must be an identifier, got {name!r}.")
        if name in RESERVED_NAMES:
            raise ValueError(f"Shared global name '{name}' is reserved.")
        self.namespace[name] = value
        LOGGER.debug("Declared shared global '%s'", name)

    def lookup(self, name: str, default: Any = None) -> Any:
        """Return a shared global, or ``default`` when no module set it."""

        return self.namespace.get(name, default)

    @property
    def depth(self) -> int:
        """Number of ``get`` calls currently in progress."""

        return len(self.stack)

    def is_in_flight(self, path: Path) -> bool:
        return path in self.stack

    def cached(self, path: Path) -> tuple[bool, Any]:
        """Return ``(hit, value)`` for ``path`` when caching is enabled."""

        if not self.cache_enabled or path not in self._results:
            return False, None
        return True, self._results[path]

    def remember(self, path: Path, value: Any) -> None:
        if self.cache_enabled:
            self._results[path] = value

    def clear_cache(self) -> None:
        self._results.clear()


__all__ = ["ExecutionContext", "NAMESPACE_NAME"]
