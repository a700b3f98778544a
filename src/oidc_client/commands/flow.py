"""Flow commands -- run the Authorization Code flow one step at a time.

Each command maps to one :class:`~oidc_client.client.OidcClient` operation,
so an operator can reproduce exactly what a host application does::

    oidc-client authorize-url google          # step 1: where to send the user
    oidc-client exchange google CODE          # step 2: code -> tokens
    oidc-client decode ID_TOKEN               # step 3: claims
    oidc-client userinfo google ACCESS_TOKEN  # step 4: profile

``oidc-client login`` chains all four with a local callback server.

Remote failures exit with :data:`~oidc_client.exit_codes.EXIT_AUTH_FAILURE`
after the failure has been logged.
"""

from __future__ import annotations

import sys
from typing import Any, Optional

import typer

from oidc_client.client import REDIRECT_PATH_BASE, OidcClient, decode_claims
from oidc_client.exceptions import AuthError, OidcClientError
from oidc_client.models import RequestFailure, TokenResult
from oidc_client.output import error, format_data, info, print_data, print_table, success


def _load_client(name: str) -> OidcClient:
    from oidc_client.config import load_client_config
    from oidc_client.registry import create_default_registry

    return create_default_registry().create(load_client_config(name))


def _token_data(tokens: TokenResult) -> dict[str, Any]:
    return tokens.model_dump(exclude={"raw"})


def providers_command() -> None:
    """List the provider types clients can use."""
    from oidc_client.registry import create_default_registry

    registry = create_default_registry()
    rows = [
        [provider_type, registry.get_provider(provider_type).__name__]
        for provider_type in registry.list_types()
    ]
    print_table(["Provider", "Class"], rows, title="Providers")


def authorize_url_command(
    name: str = typer.Argument(help="Client name."),
    scope: Optional[str] = typer.Option(
        None, "--scope", help="Space-separated scopes (default: the saved default scope)."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Host base URL the callback path is appended to."
    ),
) -> None:
    """Print the provider authorization URL for a client."""
    from oidc_client.config import resolve_base_url, resolve_scope
    from oidc_client.context import LocalRequestContext

    try:
        client = _load_client(name)
        context = LocalRequestContext(resolve_base_url(base_url))
        redirect = client.authorize(context, resolve_scope(scope))
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Redirect URI: {client.redirect_uri(context)}")
    print_data(redirect.url)


def exchange_command(
    name: str = typer.Argument(help="Client name."),
    code: str = typer.Argument(help="Authorization code from the callback."),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Host base URL used when the code was requested."
    ),
) -> None:
    """Exchange an authorization code for tokens."""
    from oidc_client.config import resolve_base_url
    from oidc_client.context import LocalRequestContext

    try:
        client = _load_client(name)
        result = client.retrieve_tokens(code, LocalRequestContext(resolve_base_url(base_url)))
        if isinstance(result, RequestFailure):
            raise result.to_error()
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_data(_token_data(result))


def decode_command(
    token: str = typer.Argument(help="ID token, or '-' to read it from stdin."),
) -> None:
    """Decode an ID token's claims. The signature is NOT verified."""
    if token == "-":
        token = sys.stdin.read().strip()
    try:
        claims = decode_claims(token)
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    format_data(claims)


def userinfo_command(
    name: str = typer.Argument(help="Client name."),
    access_token: str = typer.Argument(help="Access token from 'exchange'."),
) -> None:
    """Fetch the user's profile from the provider's userinfo endpoint."""
    try:
        client = _load_client(name)
        result = client.retrieve_user_info(access_token)
        if isinstance(result, RequestFailure):
            raise result.to_error()
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    format_data(result)


def login_command(
    name: str = typer.Argument(help="Client name."),
    port: int = typer.Option(8400, "--port", help="Local callback server port."),
    scope: Optional[str] = typer.Option(
        None, "--scope", help="Space-separated scopes (default: the saved default scope)."
    ),
    userinfo: bool = typer.Option(
        True, "--userinfo/--no-userinfo", help="Also call the userinfo endpoint."
    ),
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Print the URL instead of opening a browser."
    ),
    timeout: float = typer.Option(120.0, "--timeout", help="Seconds to wait for the callback."),
) -> None:
    """Run the full Authorization Code flow against a local callback server.

    The provider must allow ``http://127.0.0.1:PORT/openid-connect/NAME``
    as a redirect URI.
    """
    from oidc_client.callback import wait_for_callback
    from oidc_client.config import resolve_scope
    from oidc_client.context import LocalRequestContext

    base_url = f"http://127.0.0.1:{port}/"
    try:
        client = _load_client(name)
        context = LocalRequestContext(base_url)
        redirect = client.authorize(context, resolve_scope(scope))

        if no_browser:
            info(f"Open this URL to sign in:\n{redirect.url}")
        else:
            info("Opening browser for sign-in...")
        params = wait_for_callback(
            port,
            f"{REDIRECT_PATH_BASE}/{client.name}",
            redirect.url,
            open_browser=not no_browser,
            timeout=timeout,
        )
        if not context.verify_state_token(params.get("state", "")):
            raise AuthError("State token mismatch; the callback did not come from this login")

        tokens = client.retrieve_tokens(params["code"], LocalRequestContext(base_url))
        if isinstance(tokens, RequestFailure):
            raise tokens.to_error()

        output: dict[str, Any] = {
            "tokens": _token_data(tokens),
            "claims": client.decode_id_token(tokens.id_token),
        }
        if userinfo:
            profile = client.retrieve_user_info(tokens.access_token)
            if isinstance(profile, RequestFailure):
                raise profile.to_error()
            output["userinfo"] = profile
    except OidcClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f'Signed in with "{client.label}".')
    format_data(output)
