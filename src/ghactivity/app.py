"""Typer application and CLI entry point for ghactivity.

This module wires together the top-level Typer application and registers
the built-in commands (``activity``, ``user``, ``cache``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~ghactivity.exceptions.GhActivityError` failures are printed once
to stderr and mapped to their exit code; unexpected exceptions are written
to a crash log under the data directory.

See Also:
    :mod:`ghactivity.config`: Configuration resolution.
    :mod:`ghactivity.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import TYPE_CHECKING, Any

import typer

from ghactivity import __version__
from ghactivity.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED

if TYPE_CHECKING:
    from ghactivity.output import OutputFormat


app = typer.Typer(
    name="ghactivity",
    help="Show a GitHub user's recent public activity.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from ghactivity.commands.activity import activity_command, user_command  # noqa: E402
from ghactivity.commands.cache import cache_app  # noqa: E402
from ghactivity.commands.config import config_app  # noqa: E402

app.command("activity")(activity_command)
app.command("user")(user_command)
app.add_typer(cache_app, name="cache", help="Inspect and clear cached responses.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"ghactivity {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
    no_input: bool = typer.Option(
        False, "--no-input", help="Disable interactive prompts."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~ghactivity.output.OutputManager` and
    the log handler from CLI flags, and stores shared options in the Typer
    context so that sub-commands can read them via ``ctx.obj``.

    When neither ``--json`` nor ``--plain`` is given, the ``output.format``
    setting from the configuration decides.
    """
    from ghactivity.output import OutputFormat, OutputManager, configure_logging, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["force"] = force
    ctx.obj["no_input"] = no_input
    ctx.obj["verbose"] = verbose


def _configured_format() -> OutputFormat:
    """Return the output format from the config files, or ``AUTO``.

    Config errors are left for the command itself to report.
    """
    from ghactivity.config import resolve_config
    from ghactivity.exceptions import ConfigError
    from ghactivity.output import OutputFormat

    try:
        return OutputFormat(resolve_config().output.format)
    except (ConfigError, ValueError):
        return OutputFormat.AUTO


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from ghactivity.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``ghactivity`` console script.

    Unhandled :class:`~ghactivity.exceptions.GhActivityError` instances
    cause a single error line on stderr and an exit with the error's
    ``exit_code``. All other exceptions produce a crash log and a generic
    failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from ghactivity.exceptions import GhActivityError
        from ghactivity.output import error

        if isinstance(exc, GhActivityError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
