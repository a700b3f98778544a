"""Google OpenID Connect provider.

Implements the ``google`` provider type with Google's fixed endpoints.

See Also:
    :class:`~oidc_client.plugins.google.plugin.GoogleClient`
"""

from oidc_client.plugins.google.plugin import GoogleClient

__all__ = ["GoogleClient"]
