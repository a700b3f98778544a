"""Google OIDC client.

Google publishes stable endpoint URLs, so :class:`GoogleClient` needs only
``client_id`` and ``client_secret`` in its settings.
"""

from __future__ import annotations

from oidc_client.client import OidcClient
from oidc_client.models import Endpoints

AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
USERINFO_ENDPOINT = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleClient(OidcClient):
    """OpenID Connect client for Google accounts."""

    provider_type = "google"

    def get_endpoints(self) -> Endpoints:
        return Endpoints(
            authorization=AUTHORIZATION_ENDPOINT,
            token=TOKEN_ENDPOINT,
            userinfo=USERINFO_ENDPOINT,
        )
