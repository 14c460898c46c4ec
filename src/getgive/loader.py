"""Load module files and run them with injected ``get``/``give`` capabilities."""

from __future__ import annotations

import __future__
import ast
import codecs
import inspect
import logging
import os
from pathlib import Path
from types import FunctionType
from typing import Any

from .context import ExecutionContext
from .errors import (
    CircularDependencyError,
    ModuleSyntaxError,
    SourceNotFoundError,
    SourceReadError,
)
from .types import Getter, Giver, PathArg, ResultSlot, SourceModule

LOGGER = logging.getLogger(__name__)

MODULE_FUNCTION = "__getgive_module__"
SCRIPT_FUNCTION = "__getgive_script__"
_MODULE_TEMPLATE = f"def {MODULE_FUNCTION}(get, give):\n    pass\n"
_SCRIPT_TEMPLATE = f"def {SCRIPT_FUNCTION}():\n    pass\n"


def resolve_path(filename: PathArg, parent: PathArg) -> Path:
    """Resolve ``filename`` against the directory containing ``parent``."""

    if not isinstance(filename, (str, os.PathLike)):
        raise TypeError(f"get() expects a path string, got {type(filename).__name__}.")
    directory = os.path.dirname(os.fspath(parent))
    return Path(os.path.abspath(os.path.join(directory, os.fspath(filename))))


def read_source(path: Path, encoding: str = "utf-8") -> SourceModule:
    """Read the module at ``path`` as text.

    A leading UTF-8 byte order mark is dropped, as the interpreter does.
    """

    try:
        source = path.read_text(encoding=_decoding_for(encoding))
    except FileNotFoundError as exc:
        raise SourceNotFoundError(f"Module not found: {path}", path=path) from exc
    except (OSError, UnicodeDecodeError, LookupError) as exc:
        raise SourceReadError(f"Cannot read module {path}: {exc}", path=path) from exc
    return SourceModule(path=path, source=source)


def _decoding_for(encoding: str) -> str:
    try:
        if codecs.lookup(encoding).name == "utf-8":
            return "utf-8-sig"
    except LookupError:
        pass
    return encoding


def compile_module(module: SourceModule, namespace: dict[str, Any]) -> FunctionType:
    """Return ``module`` as a function of ``(get, give)`` bound to ``namespace``."""

    return _instantiate(module, namespace, _MODULE_TEMPLATE, MODULE_FUNCTION)


def compile_script(module: SourceModule, namespace: dict[str, Any]) -> FunctionType:
    """Return ``module`` as a zero-argument function bound to ``namespace``."""

    return _instantiate(module, namespace, _SCRIPT_TEMPLATE, SCRIPT_FUNCTION)


def _instantiate(
    module: SourceModule,
    namespace: dict[str, Any],
    template: str,
    name: str,
) -> FunctionType:
    filename = str(module.path)
    try:
        tree = ast.parse(module.source, filename=filename)
    except (SyntaxError, ValueError) as exc:
        raise _syntax_error(module.path, exc) from exc

    body, flags = _split_future_imports(module.path, tree.body)
    wrapper = ast.parse(template, filename=filename)
    function_def = wrapper.body[0]
    if body:
        function_def.body = body

    try:
        code = compile(wrapper, filename, "exec", flags=flags, dont_inherit=True)
    except (SyntaxError, ValueError) as exc:
        raise _syntax_error(module.path, exc) from exc

    # Separate locals keep the wrapper name out of the shared globals.
    scratch: dict[str, Any] = {}
    exec(code, namespace, scratch)
    function = scratch[name]
    if inspect.isgeneratorfunction(function):
        raise ModuleSyntaxError(
            f"'yield' outside function in {module.path}",
            path=module.path,
        )
    return function


def _split_future_imports(path: Path, body: list[ast.stmt]) -> tuple[list[ast.stmt], int]:
    statements: list[ast.stmt] = []
    flags = 0
    leading = True
    for index, node in enumerate(body):
        if isinstance(node, ast.ImportFrom) and node.module == "__future__":
            if not leading:
                raise ModuleSyntaxError(
                    f"from __future__ imports must occur at the beginning of {path} "
                    f"(line {node.lineno})",
                    path=path,
                    lineno=node.lineno,
                )
            for alias in node.names:
                if alias.name not in __future__.all_feature_names:
                    raise ModuleSyntaxError(
                        f"future feature {alias.name} is not defined in {path} "
                        f"(line {node.lineno})",
                        path=path,
                        lineno=node.lineno,
                    )
                flags |= getattr(__future__, alias.name).compiler_flag
            continue
        # Only a module docstring may precede future imports.
        if not (index == 0 and _is_docstring(node)):
            leading = False
        statements.append(node)
    return statements, flags


def _is_docstring(node: ast.stmt) -> bool:
    return (
        isinstance(node, ast.Expr)
        and isinstance(node.value, ast.Constant)
        and isinstance(node.value.value, str)
    )


def _syntax_error(path: Path, exc: Exception) -> ModuleSyntaxError:
    if isinstance(exc, SyntaxError):
        return ModuleSyntaxError(
            f"Syntax error in {path}: {exc.msg} (line {exc.lineno})",
            path=path,
            lineno=exc.lineno,
            offset=exc.offset,
        )
    return ModuleSyntaxError(f"Cannot compile {path}: {exc}", path=path)


class ModuleLoader:
    """Resolve, compile and run modules within one execution context."""

    def __init__(self, context: ExecutionContext | None = None) -> None:
        self.context = context if context is not None else ExecutionContext()

    def getter(self, parent: PathArg) -> Getter:
        """Return a ``get`` capability resolving paths next to ``parent``."""

        parent_path = Path(parent)

        def get(filename: PathArg) -> Any:
            return self.load(filename, parent=parent_path)

        return get

    def load(self, filename: PathArg, *, parent: PathArg) -> Any:
        """Run the module ``filename`` requested by ``parent`` and return its result."""

        context = self.context
        path = resolve_path(filename, parent)

        hit, value = context.cached(path)
        if hit:
            LOGGER.debug("Reusing cached result for %s", path)
            return value
        if context.detect_cycles and context.is_in_flight(path):
            raise CircularDependencyError([*context.stack, path])

        module = read_source(path, context.encoding)
        function = compile_module(module, context.namespace)
        child_get = self.getter(path)
        slot = ResultSlot()
        child_give: Giver = slot.give

        stack = context.stack
        mark = len(stack)
        stack.append(path)
        context.loads += 1
        LOGGER.debug("Running %s (depth %d)", path, len(stack))
        try:
            function(child_get, child_give)
        finally:
            del stack[mark:]

        if not slot.given:
            LOGGER.debug("Module %s gave no value", path)
        context.remember(path, slot.value)
        return slot.value


def create_loader(parent_path: PathArg, context: ExecutionContext | None = None) -> Getter:
    """Return a ``get`` function bound to the directory of ``parent_path``."""

    return ModuleLoader(context).getter(parent_path)


__all__ = [
    "ModuleLoader",
    "compile_module",
    "compile_script",
    "create_loader",
    "read_source",
    "resolve_path",
]
