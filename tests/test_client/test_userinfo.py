"""Tests for the userinfo fetch."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import httpx
import pytest

from oidc_client.models import FailureKind, RequestFailure

_GET = "oidc_client.client.httpx.get"


def _mock_response(json_body: object = None, status_code: int = 200, text: str | None = None) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    if json_body is None:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = json_body
    response.text = text if text is not None else str(json_body)
    return response


def _failure_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == "oidc_client.diagnostics"]


class TestRetrieveUserInfo:
    def test_success_returns_body_verbatim(self, generic_client) -> None:
        with patch(_GET, return_value=_mock_response({"email": "x@y.com"})):
            result = generic_client.retrieve_user_info("access-123")

        assert result == {"email": "x@y.com"}

    def test_sends_bearer_token(self, generic_client) -> None:
        with patch(_GET, return_value=_mock_response({"sub": "1"})) as mock_get:
            generic_client.retrieve_user_info("access-123")

        mock_get.assert_called_once()
        call = mock_get.call_args
        assert call.args[0] == "https://idp.example.com/userinfo"
        assert call.kwargs["headers"]["Authorization"] == "Bearer access-123"

    def test_http_500(self, generic_client, caplog) -> None:
        response = _mock_response(None, status_code=500, text="Internal Server Error")

        with caplog.at_level(logging.ERROR), patch(_GET, return_value=response):
            result = generic_client.retrieve_user_info("access-123")

        assert isinstance(result, RequestFailure)
        assert result.operation == "retrieve_user_info"
        assert result.client_name == "corp"
        assert result.status_code == 500

        records = _failure_records(caplog)
        assert len(records) == 1
        assert records[0].operation == "retrieve_user_info"
        assert records[0].client_name == "corp"
        assert records[0].response == "Internal Server Error"

    def test_transport_error(self, generic_client, caplog) -> None:
        with caplog.at_level(logging.ERROR), patch(_GET, side_effect=httpx.ConnectError("refused")):
            result = generic_client.retrieve_user_info("access-123")

        assert isinstance(result, RequestFailure)
        assert result.error == "refused"
        assert len(_failure_records(caplog)) == 1

    def test_malformed_json(self, generic_client) -> None:
        with patch(_GET, return_value=_mock_response(None, text="not json")):
            result = generic_client.retrieve_user_info("access-123")

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.INVALID_RESPONSE

    def test_empty_object_is_success(self, generic_client) -> None:
        with patch(_GET, return_value=_mock_response({})):
            result = generic_client.retrieve_user_info("access-123")

        assert result == {}
        assert not isinstance(result, RequestFailure)

    def test_non_ascii_access_token(self, generic_client, caplog) -> None:
        with caplog.at_level(logging.ERROR), patch(_GET) as mock_get:
            result = generic_client.retrieve_user_info("tökén")

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.REMOTE_REQUEST_FAILED
        assert "non-ASCII" in (result.error or "")
        assert len(_failure_records(caplog)) == 1
        mock_get.assert_not_called()

    def test_header_encoding_error(self, generic_client) -> None:
        exc = UnicodeEncodeError("ascii", "x", 0, 1, "ordinal not in range(128)")
        with patch(_GET, side_effect=exc):
            result = generic_client.retrieve_user_info("access-123")

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.REMOTE_REQUEST_FAILED
