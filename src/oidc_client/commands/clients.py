"""Client commands -- manage stored client configurations.

Provides the ``oidc-client clients`` sub-command group. Each client is
saved as one JSON file in the config directory and validated against its
provider type before it is written.

Typical workflow::

    oidc-client clients add google --provider google \\
        --client-id 123.apps.googleusercontent.com \\
        --client-secret-source env:GOOGLE_CLIENT_SECRET
    oidc-client clients list
    oidc-client clients show google
"""

from __future__ import annotations

from typing import Optional

import typer

from oidc_client.exceptions import InvalidUsageError, OidcClientError
from oidc_client.exit_codes import EXIT_INVALID_USAGE
from oidc_client.models import ClientConfig
from oidc_client.output import error, format_data, info, print_table, success, suggest


clients_app = typer.Typer(no_args_is_help=True)

_MASK = "********"


def _parse_settings(pairs: list[str]) -> dict[str, str]:
    """Turn ``key=value`` strings into a mapping."""
    settings: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Settings must be key=value, got '{pair}'")
        settings[key.strip()] = value
    return settings


@clients_app.command("add")
def clients_add(
    name: str = typer.Argument(help="Machine name; also the callback path segment."),
    provider: str = typer.Option(
        "generic", "--provider", "-p", help="Provider type (see 'oidc-client providers')."
    ),
    label: Optional[str] = typer.Option(None, "--label", "-l", help="Display name."),
    client_id: str = typer.Option(..., "--client-id", help="OAuth2 client ID."),
    client_secret: Optional[str] = typer.Option(
        None, "--client-secret", help="OAuth2 client secret (stored in the config file)."
    ),
    client_secret_source: Optional[str] = typer.Option(
        None,
        "--client-secret-source",
        help="Secret source instead of a literal: env:VAR or file:/path.",
    ),
    setting: list[str] = typer.Option(
        [], "--setting", "-s", help="Provider-specific setting as key=value (repeatable)."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing client."),
) -> None:
    """Add a client configuration.

    Example::

        oidc-client clients add corp --provider generic --client-id abc \\
            --client-secret-source env:CORP_SECRET \\
            -s authorization_endpoint=https://idp.corp/authorize \\
            -s token_endpoint=https://idp.corp/token \\
            -s userinfo_endpoint=https://idp.corp/userinfo
    """
    from oidc_client.config import client_exists, resolve_credential, save_client_config
    from oidc_client.registry import create_default_registry

    try:
        if client_secret is None and client_secret_source is None:
            raise InvalidUsageError(
                "Provide --client-secret or --client-secret-source"
            )
        if client_exists(name) and not force:
            raise InvalidUsageError(f"Client '{name}' already exists (use --force to replace)")

        settings = _parse_settings(setting)
        settings["client_id"] = client_id
        settings["client_secret"] = (
            client_secret if client_secret is not None else resolve_credential(client_secret_source)
        )
        config = ClientConfig.model_validate(
            {"name": name, "label": label or name, "provider": provider, "settings": settings}
        )
        create_default_registry().create(config)
        path = save_client_config(config, secret_source=client_secret_source)
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except ValueError as exc:
        error(f"Invalid client definition: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    success(f'Client "{name}" saved to {path}')
    suggest(f"Try it: oidc-client login {name}")


@clients_app.command("import")
def clients_import(
    path: str = typer.Argument(help="JSON or YAML file with name, label, provider, settings."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing client."),
) -> None:
    """Import a client definition from a file."""
    from oidc_client.config import client_exists, import_client_file, save_client_config
    from oidc_client.registry import create_default_registry

    try:
        raw, config = import_client_file(path)
        if client_exists(config.name) and not force:
            raise InvalidUsageError(
                f"Client '{config.name}' already exists (use --force to replace)"
            )
        create_default_registry().create(config)
        secret_source = (raw.get("settings") or {}).get("client_secret_source")
        saved = save_client_config(config, secret_source=secret_source)
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f'Client "{config.name}" imported to {saved}')


@clients_app.command("list")
def clients_list() -> None:
    """List stored clients."""
    from oidc_client.config import list_clients, load_client_config

    names = list_clients()
    if not names:
        info("No clients configured.")
        suggest("Add one: oidc-client clients add NAME --client-id ID ...")
        return

    rows: list[list[str]] = []
    for name in names:
        try:
            config = load_client_config(name)
        except OidcClientError as exc:
            rows.append([name, "", "", f"(invalid: {exc})"])
            continue
        rows.append([config.name, config.label, config.provider, config.settings.client_id])
    print_table(["Name", "Label", "Provider", "Client ID"], rows, title="Clients")


@clients_app.command("show")
def clients_show(
    name: str = typer.Argument(help="Client name."),
    reveal: bool = typer.Option(False, "--reveal", help="Show the client secret."),
) -> None:
    """Show a stored client with its secret masked."""
    from oidc_client.config import load_client_config

    try:
        config = load_client_config(name)
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    data = config.model_dump(mode="json")
    if not reveal:
        data["settings"]["client_secret"] = _MASK
    format_data(data)


@clients_app.command("remove")
def clients_remove(
    name: str = typer.Argument(help="Client name."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Remove a stored client."""
    from oidc_client.config import delete_client_config

    if not yes and not typer.confirm(f'Remove client "{name}"?'):
        info("Cancelled.")
        raise typer.Exit()

    try:
        delete_client_config(name)
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f'Client "{name}" removed.')
