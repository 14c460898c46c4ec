"""Core data structures shared by the loader and bootstrap."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

NO_VALUE = None

PathArg = str | os.PathLike
Getter = Callable[[PathArg], Any]
Giver = Callable[[Any], None]


@dataclass(frozen=True)
class SourceModule:
    """One file read for a single load; never reused across loads."""

    path: Path
    source: str


class ResultSlot:
    """Single mutable cell written by a module's ``give`` capability."""

    __slots__ = ("value", "writes")

    def __init__(self) -> None:
        self.value: Any = NO_VALUE
        self.writes = 0

    def give(self, value: Any) -> None:
        """Overwrite the stored value; the last call wins."""

        self.value = value
        self.writes += 1

    @property
    def given(self) -> bool:
        return self.writes > 0


__all__ = ["Getter", "Giver", "NO_VALUE", "PathArg", "ResultSlot", "SourceModule"]
