"""Tests for the authorization code exchange."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import httpx
import pytest

from oidc_client.models import FailureKind, RequestFailure, TokenResult
from oidc_client.plugins.google.plugin import TOKEN_ENDPOINT


def _mock_response(json_body: object = None, status_code: int = 200, text: str | None = None) -> MagicMock:
    """Mock ``httpx.Response``; ``json()`` raises when *json_body* is ``None``."""
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


_POST = "oidc_client.client.httpx.post"


class TestRetrieveTokensSuccess:
    def test_returns_token_result(self, google_client, context) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": 3600}

        with patch(_POST, return_value=_mock_response(body)):
            result = google_client.retrieve_tokens("auth-code", context)

        assert isinstance(result, TokenResult)
        assert result.id_token == "A"
        assert result.access_token == "B"
        assert result.expire == context.request_time + 3600
        assert result.raw == body

    def test_request_shape(self, google_client, context) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": 3600}

        with patch(_POST, return_value=_mock_response(body)) as mock_post:
            google_client.retrieve_tokens("4/0A b", context)

        mock_post.assert_called_once()
        call = mock_post.call_args
        assert call.args[0] == TOKEN_ENDPOINT
        assert call.kwargs["content"] == (
            "code=4/0A%20b"
            "&client_id=123.apps.googleusercontent.com"
            "&client_secret=g-secret"
            "&redirect_uri=https%3A//app.example.com/openid-connect/google"
            "&grant_type=authorization_code"
        )
        assert call.kwargs["headers"] == {"Content-Type": "application/x-www-form-urlencoded"}

    def test_timeouts(self, google_client, context) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": 3600}

        with patch(_POST, return_value=_mock_response(body)) as mock_post:
            google_client.retrieve_tokens("code", context)

        timeout = mock_post.call_args.kwargs["timeout"]
        assert timeout.connect == 3.0
        assert timeout.read == 15.0

    def test_redirect_uri_matches_authorize(self, generic_client, context) -> None:
        from urllib.parse import parse_qsl, urlsplit

        from oidc_client.encoding import parse_query

        auth_params = dict(parse_qsl(urlsplit(generic_client.authorize(context).url).query))
        body = {"id_token": "A", "access_token": "B", "expires_in": 60}

        with patch(_POST, return_value=_mock_response(body)) as mock_post:
            generic_client.retrieve_tokens("code", context)

        posted = parse_query(mock_post.call_args.kwargs["content"])
        assert posted["redirect_uri"] == auth_params["redirect_uri"]

    def test_string_expires_in(self, google_client, context) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": "120"}

        with patch(_POST, return_value=_mock_response(body)):
            result = google_client.retrieve_tokens("code", context)

        assert isinstance(result, TokenResult)
        assert result.expire == context.request_time + 120

    def test_no_log_on_success(self, google_client, context, caplog) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": 3600}

        with caplog.at_level(logging.ERROR), patch(_POST, return_value=_mock_response(body)):
            google_client.retrieve_tokens("code", context)

        assert _failure_records(caplog) == []


class TestRetrieveTokensFailure:
    def test_http_401_returns_failure_and_logs_once(self, google_client, context, caplog) -> None:
        response = _mock_response({"error": "invalid_grant"}, status_code=401, text='{"error":"invalid_grant"}')

        with caplog.at_level(logging.ERROR), patch(_POST, return_value=response):
            result = google_client.retrieve_tokens("bad-code", context)

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.REMOTE_REQUEST_FAILED
        assert result.status_code == 401
        assert result.body == '{"error":"invalid_grant"}'
        assert result.operation == "retrieve_tokens"
        assert result.client_name == "google"

        records = _failure_records(caplog)
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert records[0].operation == "retrieve_tokens"
        assert records[0].client_name == "google"
        assert records[0].status_code == 401
        assert records[0].response == '{"error":"invalid_grant"}'

    def test_transport_error(self, google_client, context, caplog) -> None:
        with caplog.at_level(logging.ERROR), patch(_POST, side_effect=httpx.ConnectTimeout("timed out")):
            result = google_client.retrieve_tokens("code", context)

        assert isinstance(result, RequestFailure)
        assert result.status_code is None
        assert result.error == "timed out"
        assert len(_failure_records(caplog)) == 1

    def test_malformed_json(self, google_client, context, caplog) -> None:
        response = _mock_response(None, text="<html>oops</html>")

        with caplog.at_level(logging.ERROR), patch(_POST, return_value=response):
            result = google_client.retrieve_tokens("code", context)

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.INVALID_RESPONSE
        assert result.body == "<html>oops</html>"
        assert len(_failure_records(caplog)) == 1

    def test_json_array_is_invalid(self, google_client, context) -> None:
        with patch(_POST, return_value=_mock_response(["id_token"])):
            result = google_client.retrieve_tokens("code", context)

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.INVALID_RESPONSE

    @pytest.mark.parametrize("missing", ["id_token", "access_token", "expires_in"])
    def test_missing_field(self, google_client, context, caplog, missing: str) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": 3600}
        del body[missing]

        with caplog.at_level(logging.ERROR), patch(_POST, return_value=_mock_response(body)):
            result = google_client.retrieve_tokens("code", context)

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.MISSING_RESPONSE_FIELDS
        assert missing in (result.error or "")
        assert len(_failure_records(caplog)) == 1

    def test_non_numeric_expires_in(self, google_client, context) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": "soon"}

        with patch(_POST, return_value=_mock_response(body)):
            result = google_client.retrieve_tokens("code", context)

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.MISSING_RESPONSE_FIELDS

    @pytest.mark.parametrize(
        "field, value",
        [
            ("id_token", {"x": 1}),
            ("id_token", ""),
            ("access_token", 123),
            ("access_token", ["B"]),
            ("expires_in", True),
            ("expires_in", 59.9),
            ("expires_in", "-5"),
        ],
    )
    def test_wrongly_typed_field(self, google_client, context, caplog, field: str, value: object) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": 3600, field: value}

        with caplog.at_level(logging.ERROR), patch(_POST, return_value=_mock_response(body)):
            result = google_client.retrieve_tokens("code", context)

        assert isinstance(result, RequestFailure)
        assert result.kind == FailureKind.MISSING_RESPONSE_FIELDS
        assert field in (result.error or "")
        assert len(_failure_records(caplog)) == 1

    def test_digit_string_expires_in(self, google_client, context) -> None:
        body = {"id_token": "A", "access_token": "B", "expires_in": "3600"}

        with patch(_POST, return_value=_mock_response(body)):
            result = google_client.retrieve_tokens("code", context)

        assert isinstance(result, TokenResult)
        assert result.expire == context.request_time + 3600

    def test_failure_converts_to_error(self, google_client, context) -> None:
        from oidc_client.exceptions import RemoteRequestError
        from oidc_client.exit_codes import EXIT_AUTH_FAILURE

        with patch(_POST, return_value=_mock_response({}, status_code=400)):
            result = google_client.retrieve_tokens("code", context)

        exc = result.to_error()
        assert isinstance(exc, RemoteRequestError)
        assert exc.failure is result
        assert exc.exit_code == EXIT_AUTH_FAILURE
        assert "HTTP 400" in str(exc)
