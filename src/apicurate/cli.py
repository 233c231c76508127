"""apicurate CLI - Main entry point."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console

from apicurate import __version__
from apicurate.cli_utils import (
    EXIT_USER_ERROR,
    CliState,
    get_state_from_context,
    resolve_path,
    setup_logging,
    spec_root_url_argument,
    specs_dir_option,
    success,
    warning,
    wire_config,
)
from apicurate.collection import BatchReport, Collection
from apicurate.converters import TYPES
from apicurate.errors import CurateError

app = typer.Typer(
    name="apicurate",
    help="apicurate - Maintain a curated collection of machine-readable API descriptions.",
    add_completion=False,
)

# Rich consoles for output
console = Console()
err_console = Console(stderr=True)


# -----------------------------------------------------------------------------
# Output Helpers
# -----------------------------------------------------------------------------


def _output_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]Error:[/red] {message}", markup=True, highlight=False)


def _output_info(message: str) -> None:
    """Print an info message."""
    console.print(message, markup=False, highlight=False, soft_wrap=True)


def _exit_error(message: str, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print error and exit."""
    _output_error(message)
    raise typer.Exit(code=exit_code)


def _collection(ctx: typer.Context) -> Collection:
    state = get_state_from_context(ctx)
    return Collection(state.root, config=state.config, err_console=err_console)


def _finish(ctx: typer.Context, report: BatchReport) -> None:
    """Exit with the batch status."""
    state = get_state_from_context(ctx)
    if report.has_errors:
        warning(f"{len(report.failures)} of {report.processed} failed")
    code = report.exit_code(state.error_exit_code)
    if code:
        raise typer.Exit(code=code)


# -----------------------------------------------------------------------------
# Version and Main Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"apicurate version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    root: Path | None = typer.Option(
        None,
        "--root",
        "-r",
        help="Collection root directory. Defaults to current directory.",
    ),
    specs_dir: str | None = specs_dir_option(),
    always_zero: bool = typer.Option(
        False,
        "--always-zero",
        help="Always return 0 as exit code.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug details (fixes applied, validation passes).",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """apicurate - Maintain a curated collection of machine-readable API descriptions."""
    setup_logging(verbose=verbose, console=err_console)

    root_path = resolve_path(root) if root is not None else Path.cwd()
    config = wire_config(specs_dir=specs_dir, start_dir=root_path)
    ctx.obj = CliState(root=root_path, config=config, always_zero=always_zero)


# -----------------------------------------------------------------------------
# Collection Commands
# -----------------------------------------------------------------------------


@app.command()
def urls(ctx: typer.Context) -> None:
    """Show the source URL of every spec."""
    try:
        for url in _collection(ctx).urls():
            _output_info(url)
    except CurateError as e:
        _exit_error(str(e))


@app.command()
def update(
    ctx: typer.Context,
    directory: str | None = typer.Argument(
        None,
        metavar="[DIR]",
        help="Only update specs below this collection directory.",
    ),
) -> None:
    """Rebuild specs from their sources."""
    try:
        report = _collection(ctx).update(directory)
    except CurateError as e:
        _exit_error(str(e))
    _finish(ctx, report)


@app.command()
def validate(ctx: typer.Context) -> None:
    """Validate every spec in the collection.

    Exits with the configured error exit code if any spec has errors.
    Warnings do not cause validation failure.
    """
    try:
        report = _collection(ctx).validate()
    except CurateError as e:
        _exit_error(str(e))
    _finish(ctx, report)


@app.command()
def add(
    ctx: typer.Context,
    type_name: str = typer.Argument(
        ...,
        metavar="TYPE",
        help=f"Source format: {', '.join(TYPES)}.",
    ),
    url: str = typer.Argument(..., metavar="URL", help="Source URL or path."),
    fixup: bool = typer.Option(
        False,
        "--fixup",
        "-f",
        help="Open the result in an editor and record the edit as a fixup.",
    ),
    service: str | None = typer.Option(
        None,
        "--service",
        "-s",
        help="Supply the service name.",
    ),
) -> None:
    """Add a new spec to the collection."""
    if type_name not in TYPES:
        _exit_error(f"Unknown source type '{type_name}'. Choose from: {', '.join(TYPES)}")

    try:
        report = _collection(ctx).add(type_name, url, service=service, fixup=fixup)
    except CurateError as e:
        _exit_error(str(e))
    _finish(ctx, report)


@app.command()
def google(ctx: typer.Context) -> None:
    """Add new Google APIs and refresh their preferred versions."""
    try:
        report = _collection(ctx).update_google()
    except CurateError as e:
        _exit_error(str(e))
    _finish(ctx, report)


@app.command()
def cache(ctx: typer.Context, spec_root_url: str = spec_root_url_argument()) -> None:
    """Cache external resources (logos) and point specs at the copies."""
    try:
        report = _collection(ctx).cache_resources(spec_root_url)
    except CurateError as e:
        _exit_error(str(e))
    _finish(ctx, report)


# -----------------------------------------------------------------------------
# Index Commands
# -----------------------------------------------------------------------------


@app.command()
def api(ctx: typer.Context, spec_root_url: str = spec_root_url_argument()) -> None:
    """Generate the version-list index."""
    try:
        count = _collection(ctx).write_list(spec_root_url)
    except CurateError as e:
        _exit_error(str(e))
    success(f"Listed {count} APIs")


@app.command()
def csv(ctx: typer.Context) -> None:
    """Generate the CSV list of preferred versions."""
    state = get_state_from_context(ctx)
    try:
        _collection(ctx).write_csv()
    except CurateError as e:
        _exit_error(str(e))
    success(f"Wrote {state.config.csv_path}")


@app.command()
def apisjson(ctx: typer.Context, spec_root_url: str = spec_root_url_argument()) -> None:
    """Generate the APIs.json directory document."""
    state = get_state_from_context(ctx)
    try:
        _collection(ctx).write_apis_json(spec_root_url)
    except CurateError as e:
        _exit_error(str(e))
    success(f"Wrote {state.config.apis_json_path}")


if __name__ == "__main__":
    app()
