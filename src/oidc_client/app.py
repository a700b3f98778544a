"""Typer application factory and CLI entry point for oidc-client.

The ``oidc-client`` command lets an operator configure OIDC clients and
drive each step of the Authorization Code flow by hand:

* ``clients`` -- add, import, list, show, and remove stored clients.
* ``config`` -- show, set, and reset global defaults.
* ``providers`` -- list the provider types available.
* ``authorize-url`` / ``exchange`` / ``decode`` / ``userinfo`` -- one
  protocol step each.
* ``login`` -- the whole flow, with a local callback server.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from oidc_client import __version__
from oidc_client.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="oidc-client",
    help="OpenID Connect Authorization Code flow client.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"oidc-client {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Initialise output formatting and logging before every sub-command."""
    from oidc_client.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet)
    set_output(output)
    _configure_logging(output.log_handler(), verbose)


def _configure_logging(handler: logging.Handler, verbose: bool) -> None:
    """Send ``oidc_client`` log records to *handler*, replacing earlier handlers."""
    package_logger = logging.getLogger("oidc_client")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from oidc_client.commands.clients import clients_app  # noqa: E402
from oidc_client.commands.config import config_app  # noqa: E402
from oidc_client.commands.flow import (  # noqa: E402
    authorize_url_command,
    decode_command,
    exchange_command,
    login_command,
    providers_command,
    userinfo_command,
)

app.add_typer(clients_app, name="clients", help="Manage stored clients.")
app.add_typer(config_app, name="config", help="View and modify global defaults.")
app.command("providers")(providers_command)
app.command("authorize-url")(authorize_url_command)
app.command("exchange")(exchange_command)
app.command("decode")(decode_command)
app.command("userinfo")(userinfo_command)
app.command("login")(login_command)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback to the data directory and return its path."""
    from oidc_client.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``oidc-client`` console script.

    :class:`~oidc_client.exceptions.OidcClientError` exits with the error's
    ``exit_code``; any other exception writes a crash log and exits with
    :data:`~oidc_client.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from oidc_client.exceptions import OidcClientError
        from oidc_client.output import error

        if isinstance(exc, OidcClientError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
