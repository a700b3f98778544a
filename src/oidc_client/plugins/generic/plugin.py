"""Generic OIDC client -- endpoint URLs supplied through settings.

This module provides :class:`GenericClient`, for providers that are not
built in. The three endpoint URLs are read from the client's settings:

* ``authorization_endpoint``
* ``token_endpoint``
* ``userinfo_endpoint``

They are validated when the client is constructed, so a misconfigured
client fails at load time rather than on the first login.
"""

from __future__ import annotations

from urllib.parse import urlparse

from oidc_client.client import OidcClient
from oidc_client.models import Endpoints

ENDPOINT_SETTINGS = {
    "authorization": "authorization_endpoint",
    "token": "token_endpoint",
    "userinfo": "userinfo_endpoint",
}


class GenericClient(OidcClient):
    """OpenID Connect client for any provider configured by URL."""

    provider_type = "generic"

    def validate_settings(self) -> list[str]:
        """Check that every endpoint setting is an absolute http(s) URL."""
        errors: list[str] = []
        for key in ENDPOINT_SETTINGS.values():
            value = self.get_setting(key)
            if not value:
                errors.append(f"Generic provider requires '{key}'")
                continue
            parsed = urlparse(str(value))
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append(f"'{key}' must be an absolute http(s) URL, got {value!r}")
        return errors

    def get_endpoints(self) -> Endpoints:
        return Endpoints(
            **{field: self.get_setting(key) for field, key in ENDPOINT_SETTINGS.items()}
        )
