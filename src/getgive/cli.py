"""getgive command-line interface."""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from .bootstrap import run, run_isolated
from .config import Config, ConfigError, load_config
from .context import ExecutionContext
from .errors import LoaderError
from .logging import configure_logging

app = typer.Typer(help="Run a module file with get/give loading.", add_completion=False)
LOGGER = logging.getLogger(__name__)


@app.command()
def run_command(
    entry: Annotated[
        Path,
        typer.Argument(..., help="Entry module, relative to the current directory."),
    ],
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to config (env GETGIVE_CONFIG or ~/.config/getgive/config.yaml).",
        ),
    ] = None,
    isolated: Annotated[
        bool,
        typer.Option(
            "--isolated",
            help="Run the entry in a private scope without get/give.",
        ),
    ] = False,
    cache: Annotated[
        bool | None,
        typer.Option(
            "--cache/--no-cache",
            help="Reuse results of modules already loaded in this run.",
            show_default=False,
        ),
    ] = None,
    detect_cycles: Annotated[
        bool | None,
        typer.Option(
            "--detect-cycles/--no-detect-cycles",
            help="Fail fast when a module is requested while it is still loading.",
            show_default=False,
        ),
    ] = None,
    print_result: Annotated[
        bool,
        typer.Option(
            "--print-result",
            help="Print the value given by the entry module.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Enable debug logging."),
    ] = False,
) -> None:
    """Load ENTRY and everything it requests with get()."""

    settings = _load_config(config)
    try:
        configure_logging(settings.logging, verbose=verbose)
    except ConfigError as exc:  # pragma: no cover - levels are validated on load
        _config_failure(exc)

    context = _build_context(settings, cache=cache, detect_cycles=detect_cycles)
    try:
        if isolated:
            run_isolated(entry, context=context)
            result: Any = None
        else:
            result = run(entry, context=context)
    except LoaderError as exc:
        LOGGER.debug("Loader failure", exc_info=True)
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    except RecursionError as exc:
        typer.secho(
            f"Error: maximum recursion depth exceeded after {context.loads} module load(s); "
            "check for circular get() calls or use --detect-cycles.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1) from exc
    except Exception as exc:
        typer.echo("".join(traceback.format_exception(exc)), err=True, nl=False)
        raise typer.Exit(1) from exc

    if print_result and result is not None:
        typer.echo(repr(result))


def _load_config(path: Path | None) -> Config:
    try:
        return load_config(path)
    except ConfigError as exc:
        _config_failure(exc)


def _config_failure(exc: ConfigError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(2) from exc


def _build_context(
    settings: Config,
    *,
    cache: bool | None,
    detect_cycles: bool | None,
) -> ExecutionContext:
    context = ExecutionContext.from_config(settings.loader, settings.globals)
    if cache is not None:
        context.cache_enabled = cache
    if detect_cycles is not None:
        context.detect_cycles = detect_cycles
    return context


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
