"""Client registry -- maps provider types to client classes.

The :class:`ClientRegistry` turns a stored
:class:`~oidc_client.models.ClientConfig` into a live
:class:`~oidc_client.client.OidcClient` by looking up the class registered
for ``config.provider``.

Third-party providers register through the ``oidc_client.providers``
entry-point group in their ``pyproject.toml``::

    [project.entry-points."oidc_client.providers"]
    okta = "oidc_okta.plugin:OktaClient"

For most use cases, call :func:`create_default_registry`.
"""

from __future__ import annotations

import importlib.metadata
import logging

from oidc_client.client import OidcClient
from oidc_client.exceptions import ConfigError
from oidc_client.models import ClientConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "oidc_client.providers"
"""The entry-point group name used for provider discovery."""


class ClientRegistry:
    """Registry of provider types.

    Example::

        from oidc_client.plugins.google import GoogleClient

        registry = ClientRegistry()
        registry.register(GoogleClient)
        client = registry.create(config)
    """

    def __init__(self) -> None:
        self._providers: dict[str, type[OidcClient]] = {}

    def register(self, client_cls: type[OidcClient]) -> None:
        """Register *client_cls* under its ``provider_type``.

        A class registered for the same type is replaced.

        Raises:
            ConfigError: If *client_cls* does not declare a provider type.
        """
        if not client_cls.provider_type:
            raise ConfigError(f"{client_cls.__name__} does not declare a provider_type")
        self._providers[client_cls.provider_type] = client_cls

    def get_provider(self, provider_type: str) -> type[OidcClient]:
        """Return the client class registered for *provider_type*.

        Raises:
            ConfigError: If no class is registered for *provider_type*.
        """
        client_cls = self._providers.get(provider_type)
        if client_cls is None:
            available = ", ".join(sorted(self._providers)) or "(none)"
            raise ConfigError(
                f"No provider registered for type '{provider_type}'. "
                f"Available types: {available}"
            )
        return client_cls

    def create(self, config: ClientConfig) -> OidcClient:
        """Instantiate the client described by *config*."""
        return self.get_provider(config.provider).from_config(config)

    def list_types(self) -> list[str]:
        """Return the registered provider types, sorted."""
        return sorted(self._providers)

    def discover(self) -> list[str]:
        """Register providers advertised through entry points.

        Returns:
            Provider types that were registered. Entry points that fail to
            load are logged and skipped.
        """
        loaded: list[str] = []
        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            try:
                client_cls = ep.load()
                self.register(client_cls)
            except Exception as exc:
                logger.warning("Failed to load provider '%s': %s", ep.name, exc)
                continue
            loaded.append(client_cls.provider_type)
        return loaded


def create_default_registry(discover: bool = True) -> ClientRegistry:
    """Create a :class:`ClientRegistry` with the built-in providers.

    Registers ``generic`` and ``google``, then (unless *discover* is
    ``False``) any providers found through entry points.
    """
    from oidc_client.plugins.generic import GenericClient
    from oidc_client.plugins.google import GoogleClient

    registry = ClientRegistry()
    registry.register(GenericClient)
    registry.register(GoogleClient)
    if discover:
        registry.discover()
    return registry
