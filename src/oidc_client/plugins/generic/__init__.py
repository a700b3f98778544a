"""Generic OpenID Connect provider.

Implements the ``generic`` provider type, whose endpoint URLs come from the
client's settings rather than being fixed in code.

See Also:
    :class:`~oidc_client.plugins.generic.plugin.GenericClient`
    :mod:`oidc_client.client` for the client base class.
"""

from oidc_client.plugins.generic.plugin import GenericClient

__all__ = ["GenericClient"]
