"""Shared test fixtures for oidc_client.

Provides clients for each built-in provider, a deterministic request
context, config-directory isolation, and a Typer CLI runner. Fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from oidc_client.context import LocalRequestContext
from oidc_client.output import reset_output
from oidc_client.plugins.generic import GenericClient
from oidc_client.plugins.google import GoogleClient


REQUEST_TIME = 1_700_000_000
BASE_URL = "https://app.example.com/"

GENERIC_SETTINGS: dict[str, str] = {
    "client_id": "corp-client",
    "client_secret": "corp-secret",
    "authorization_endpoint": "https://idp.example.com/authorize",
    "token_endpoint": "https://idp.example.com/token",
    "userinfo_endpoint": "https://idp.example.com/userinfo",
}


# ---------------------------------------------------------------------------
# Global state reset
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Reset the output manager and the package logger after every test.

    The CLI installs a log handler bound to the streams CliRunner swaps in;
    once the test finishes those streams are closed, so the handler must go.
    """
    yield
    reset_output()
    package_logger = logging.getLogger("oidc_client")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Clients and context
# ---------------------------------------------------------------------------


@pytest.fixture
def google_client() -> GoogleClient:
    return GoogleClient(
        "google",
        "Google",
        {"client_id": "123.apps.googleusercontent.com", "client_secret": "g-secret"},
    )


@pytest.fixture
def generic_client() -> GenericClient:
    return GenericClient("corp", "Corp SSO", GENERIC_SETTINGS)


@pytest.fixture
def context() -> LocalRequestContext:
    """Request context carrying a destination hint, pinned to REQUEST_TIME."""
    return LocalRequestContext(
        BASE_URL, query={"destination": "admin/people"}, request_time=REQUEST_TIME
    )


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config and data directories at *tmp_path*.

    Forces XDG resolution on every platform and clears environment
    variables the CLI reads.
    """
    monkeypatch.setattr("oidc_client.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("OIDC_CLIENT_BASE_URL", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
