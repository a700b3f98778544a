"""oidc_client -- OpenID Connect Authorization Code flow, client side.

This package builds the authorization redirect, exchanges authorization
codes for tokens, decodes ID token claims, and fetches userinfo from an
OpenID Connect provider. Concrete providers (Google, generic OIDC) supply
their endpoint URLs; the host web framework supplies redirects, absolute
URLs, and state tokens through a :class:`~oidc_client.context.RequestContext`.

Typical usage::

    from oidc_client.context import LocalRequestContext
    from oidc_client.plugins.google import GoogleClient

    client = GoogleClient("google", "Google", {"client_id": "...", "client_secret": "..."})
    context = LocalRequestContext("https://app.example.com/")
    redirect = client.authorize(context)

Modules:
    client: The :class:`~oidc_client.client.OidcClient` base class.
    context: Host request-context interface and a local implementation.
    encoding: Recursive form/query-string encoder and decoder.
    models: Pydantic models shared across the package.
    config: XDG-aware client configuration storage.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer application and ``oidc-client`` entry point.
"""

__version__ = "0.1.0"
