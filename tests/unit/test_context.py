from __future__ import annotations

import builtins

import pytest

from getgive.config import LoaderConfig
from getgive.context import NAMESPACE_NAME, ExecutionContext


def test_namespace_starts_with_builtins_only():
    context = ExecutionContext()

    assert context.namespace == {"__builtins__": builtins, "__name__": NAMESPACE_NAME}
    assert context.depth == 0
    assert context.loads == 0


def test_shared_globals_are_declared_explicitly():
    context = ExecutionContext(shared={"greeting": "hello"})
    context.declare("answer", 42)

    assert context.lookup("greeting") == "hello"
    assert context.lookup("answer") == 42
    assert context.lookup("missing", "fallback") == "fallback"


@pytest.mark.parametrize("name", ["not an identifier", "__builtins__", "__name__", 3])
def test_declare_rejects_bad_names(name):
    context = ExecutionContext()

    with pytest.raises(ValueError):
        context.declare(name, 1)


def test_separate_contexts_do_not_share_globals():
    first = ExecutionContext()
    second = ExecutionContext()
    first.declare("flag", True)

    assert second.lookup("flag") is None


def test_cache_is_inert_unless_enabled(tmp_path):
    path = tmp_path / "x.py"
    context = ExecutionContext()
    context.remember(path, "value")

    assert context.cached(path) == (False, None)


def test_cache_returns_remembered_values(tmp_path):
    path = tmp_path / "x.py"
    context = ExecutionContext(cache=True)

    assert context.cached(path) == (False, None)
    context.remember(path, None)
    assert context.cached(path) == (True, None)
    context.clear_cache()
    assert context.cached(path) == (False, None)


def test_from_config_copies_loader_options():
    config = LoaderConfig(encoding="latin-1", cache=True, detect_cycles=True)

    context = ExecutionContext.from_config(config, {"mode": "test"})

    assert context.encoding == "latin-1"
    assert context.cache_enabled is True
    assert context.detect_cycles is True
    assert context.lookup("mode") == "test"


def test_in_flight_tracks_stack(tmp_path):
    context = ExecutionContext()
    context.stack.append(tmp_path / "a.py")

    assert context.is_in_flight(tmp_path / "a.py")
    assert not context.is_in_flight(tmp_path / "b.py")
    assert context.depth == 1
