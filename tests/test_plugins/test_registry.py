"""Tests for oidc_client.registry."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from oidc_client.client import OidcClient
from oidc_client.exceptions import ConfigError
from oidc_client.models import ClientConfig, ClientSettings, Endpoints
from oidc_client.plugins.generic import GenericClient
from oidc_client.plugins.google import GoogleClient
from oidc_client.registry import ClientRegistry, create_default_registry


class _ExampleClient(OidcClient):
    provider_type = "example"

    def get_endpoints(self) -> Endpoints:
        return Endpoints(
            authorization="https://example.com/auth",
            token="https://example.com/token",
            userinfo="https://example.com/me",
        )


def _entry_point(name: str, loaded: object = None, error: Exception | None = None) -> MagicMock:
    ep = MagicMock()
    ep.name = name
    if error is not None:
        ep.load.side_effect = error
    else:
        ep.load.return_value = loaded
    return ep


class TestClientRegistry:
    def test_default_types(self) -> None:
        registry = create_default_registry(discover=False)
        assert registry.list_types() == ["generic", "google"]
        assert registry.get_provider("google") is GoogleClient
        assert registry.get_provider("generic") is GenericClient

    def test_unknown_type(self) -> None:
        registry = create_default_registry(discover=False)
        with pytest.raises(ConfigError, match="Available types: generic, google"):
            registry.get_provider("okta")

    def test_empty_registry_message(self) -> None:
        with pytest.raises(ConfigError, match=r"\(none\)"):
            ClientRegistry().get_provider("google")

    def test_create_from_config(self) -> None:
        config = ClientConfig(
            name="google",
            label="Google",
            provider="google",
            settings=ClientSettings(client_id="cid", client_secret="sec"),
        )
        client = create_default_registry(discover=False).create(config)
        assert isinstance(client, GoogleClient)
        assert client.name == "google"

    def test_register_replaces(self) -> None:
        class OtherGoogle(_ExampleClient):
            provider_type = "google"

        registry = create_default_registry(discover=False)
        registry.register(OtherGoogle)
        assert registry.get_provider("google") is OtherGoogle

    def test_register_requires_provider_type(self) -> None:
        class Nameless(_ExampleClient):
            provider_type = ""

        with pytest.raises(ConfigError, match="provider_type"):
            ClientRegistry().register(Nameless)

    def test_discover_entry_points(self) -> None:
        eps = [
            _entry_point("example", loaded=_ExampleClient),
            _entry_point("broken", error=ImportError("no module")),
        ]
        registry = ClientRegistry()

        with patch("oidc_client.registry.importlib.metadata.entry_points", return_value=eps) as mock_eps:
            loaded = registry.discover()

        mock_eps.assert_called_once_with(group="oidc_client.providers")
        assert loaded == ["example"]
        assert registry.get_provider("example") is _ExampleClient
