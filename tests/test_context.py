"""Tests for oidc_client.context."""

from __future__ import annotations

import time

import pytest

from oidc_client.context import LocalRequestContext, RequestContext
from oidc_client.models import Redirect


class TestLocalRequestContext:
    @pytest.mark.parametrize(
        ("base_url", "path", "expected"),
        [
            ("https://app.example.com/", "openid-connect/google", "https://app.example.com/openid-connect/google"),
            ("https://app.example.com", "openid-connect/google", "https://app.example.com/openid-connect/google"),
            ("https://app.example.com/", "/openid-connect/google", "https://app.example.com/openid-connect/google"),
            ("https://example.com/drupal", "openid-connect/x", "https://example.com/drupal/openid-connect/x"),
        ],
    )
    def test_absolute_url(self, base_url: str, path: str, expected: str) -> None:
        assert LocalRequestContext(base_url).absolute_url(path) == expected

    def test_state_tokens_are_unique(self) -> None:
        context = LocalRequestContext("https://app.example.com/")
        tokens = {context.create_state_token() for _ in range(20)}
        assert len(tokens) == 20
        assert all(len(token) >= 32 for token in tokens)

    def test_state_token_single_use(self) -> None:
        context = LocalRequestContext("https://app.example.com/")
        token = context.create_state_token()
        assert context.verify_state_token(token)
        assert not context.verify_state_token(token)

    def test_unknown_state_rejected(self) -> None:
        context = LocalRequestContext("https://app.example.com/")
        context.create_state_token()
        assert not context.verify_state_token("forged")

    def test_destination(self) -> None:
        query = {"destination": "node/1", "other": "x"}
        context = LocalRequestContext("https://app.example.com/", query=query)

        assert context.destination == "node/1"
        context.clear_destination()
        assert context.destination is None
        assert context.query == {"other": "x"}
        # The caller's mapping is not mutated.
        assert query["destination"] == "node/1"

    def test_clear_destination_without_one(self) -> None:
        context = LocalRequestContext("https://app.example.com/")
        context.clear_destination()
        assert context.destination is None

    def test_redirect_default(self) -> None:
        redirect = LocalRequestContext("https://app.example.com/").redirect("https://idp/x")
        assert redirect == Redirect(url="https://idp/x", status_code=302)

    def test_request_time_defaults_to_now(self) -> None:
        before = int(time.time())
        context = LocalRequestContext("https://app.example.com/")
        assert before <= context.request_time <= int(time.time())

    def test_request_time_override(self) -> None:
        assert LocalRequestContext("https://a/", request_time=42).request_time == 42

    def test_base_class_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            RequestContext()  # type: ignore[abstract]
