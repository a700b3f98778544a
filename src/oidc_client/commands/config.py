"""Config commands -- view and modify the global defaults.

Provides the ``oidc-client config`` sub-command group. The global
configuration (:class:`~oidc_client.models.GlobalConfig`) holds the base
URL the callback path is appended to and the scope requested when
``--scope`` is not given.
"""

from __future__ import annotations

import typer

from oidc_client.exceptions import OidcClientError
from oidc_client.exit_codes import EXIT_INVALID_USAGE
from oidc_client.models import GlobalConfig
from oidc_client.output import error, format_data, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the global configuration."""
    from oidc_client.config import get_config_dir, load_global_config

    try:
        config = load_global_config()
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    format_data(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key: 'base_url' or 'scope'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a global configuration value.

    Example::

        oidc-client config set base_url https://app.example.com
        oidc-client config set scope "openid email profile"
    """
    from oidc_client.config import load_global_config, save_global_config

    if key not in GlobalConfig.model_fields:
        error(f"Unknown config key '{key}'. Valid keys: {', '.join(GlobalConfig.model_fields)}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        data = load_global_config().model_dump()
        data[key] = value
        config = GlobalConfig.model_validate(data)
        save_global_config(config)
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except ValueError as exc:
        error(f"Invalid value for '{key}': {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Restore the global configuration to its defaults."""
    from oidc_client.config import save_global_config

    if not yes and not typer.confirm("Reset global configuration to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Global configuration reset.")
