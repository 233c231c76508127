"""CLI utility functions for apicurate.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Logging setup: One RichHandler on stderr for the whole process
- Error formatting: Consistent user-friendly error messages with exit codes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from apicurate.config import CurateConfig, load_config

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad input, broken collection state, etc.)
EXIT_SYSTEM_ERROR = 2  # System error (permissions, I/O, etc.)


@dataclass
class CliState:
    """Per-invocation state stored on the Typer context.

    Attributes:
        root: Collection root directory.
        config: Resolved configuration.
        always_zero: Exit 0 even when documents failed.
    """

    root: Path
    config: CurateConfig
    always_zero: bool = False

    @property
    def error_exit_code(self) -> int:
        return 0 if self.always_zero else self.config.error_exit_code


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


def warning(msg: str) -> None:
    """Print a warning message to stderr."""
    styled_prefix = typer.style("Warning:", fg=typer.colors.YELLOW, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)


def success(msg: str) -> None:
    """Print a success message to stdout."""
    styled_prefix = typer.style("Success:", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"{styled_prefix} {msg}")


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route all library logging through one RichHandler on stderr.

    Args:
        verbose: Log at DEBUG instead of INFO.
        console: Console to log to (defaults to a stderr console).
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


# -----------------------------------------------------------------------------
# Path and Config Wiring
# -----------------------------------------------------------------------------


def resolve_path(path: str | Path, base_path: Path | None = None) -> Path:
    """Resolve ``path`` against ``base_path`` (or the cwd) into an absolute path."""
    p = Path(path)
    base = base_path or Path.cwd()
    return p.resolve() if p.is_absolute() else (base / p).resolve()


def wire_config(
    specs_dir: str | None = None,
    start_dir: Path | None = None,
) -> CurateConfig:
    """Wire CLI options to load_config with appropriate overrides.

    Args:
        specs_dir: Override for the collection tree directory.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved CurateConfig instance.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    cli_overrides: dict[str, Any] = {}

    if specs_dir is not None:
        cli_overrides["specs_dir"] = specs_dir

    try:
        return load_config(cli_overrides=cli_overrides, start_dir=start_dir)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_USER_ERROR)


def get_state_from_context(ctx: typer.Context) -> CliState:
    """Get the CliState stored on the Typer context by the main callback.

    Raises:
        typer.Exit: If no state is found in context.
    """
    state = ctx.obj
    if not isinstance(state, CliState):
        error(
            "Configuration not initialized. This is a bug in the CLI.",
            exit_code=EXIT_SYSTEM_ERROR,
        )
    return state


# -----------------------------------------------------------------------------
# Typer Option Factory Functions
# -----------------------------------------------------------------------------
# Typer consumes Option objects when decorating commands, so every command
# needs a fresh instance.


def specs_dir_option() -> Any:
    """Create a Typer Option for --specs-dir."""
    return typer.Option(
        None,
        "--specs-dir",
        help="Override the collection tree directory (default: .).",
        envvar="APICURATE_SPECS_DIR",
    )


def spec_root_url_argument() -> Any:
    """Create a Typer Argument for SPEC_ROOT_URL."""
    return typer.Argument(
        ...,
        metavar="SPEC_ROOT_URL",
        help="Public URL prefix the collection is served under.",
    )
