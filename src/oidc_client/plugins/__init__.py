"""Built-in OpenID Connect providers.

Each sub-package holds one concrete :class:`~oidc_client.client.OidcClient`:

* :mod:`oidc_client.plugins.generic` -- any provider, endpoints from settings.
* :mod:`oidc_client.plugins.google` -- Google accounts.

Third-party packages add providers through the ``oidc_client.providers``
entry-point group; see :mod:`oidc_client.registry`.
"""

from oidc_client.plugins.generic import GenericClient
from oidc_client.plugins.google import GoogleClient

__all__ = ["GenericClient", "GoogleClient"]
