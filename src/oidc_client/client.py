"""Base class for OpenID Connect clients.

:class:`OidcClient` implements the four protocol steps of the Authorization
Code flow. Each step is an independent entry point that the host calls in
order; none of them calls another:

1. :meth:`~OidcClient.authorize` -- redirect the user to the provider.
2. :meth:`~OidcClient.retrieve_tokens` -- exchange the callback ``code``.
3. :meth:`~OidcClient.decode_id_token` -- read the ID token's claims.
4. :meth:`~OidcClient.retrieve_user_info` -- call the userinfo endpoint.

Concrete providers subclass :class:`OidcClient`, set ``provider_type``, and
implement :meth:`~OidcClient.get_endpoints`.

Remote failures are returned, not raised: :meth:`retrieve_tokens` and
:meth:`retrieve_user_info` return a :class:`~oidc_client.models.RequestFailure`
and log it once through :func:`~oidc_client.diagnostics.log_request_error`.

.. warning::

   :meth:`decode_id_token` does **not** verify the token signature. Only
   trust its claims when the token came straight from the token endpoint
   over TLS.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Optional, Union

import httpx
from pydantic import ValidationError

from oidc_client.context import RequestContext
from oidc_client.diagnostics import log_request_error
from oidc_client.encoding import build_query
from oidc_client.exceptions import (
    ConfigError,
    MalformedTokenError,
    UnimplementedCapabilityError,
)
from oidc_client.models import (
    ClientConfig,
    ClientSettings,
    Endpoints,
    FailureKind,
    RequestFailure,
    TokenResult,
)

logger = logging.getLogger(__name__)

REDIRECT_PATH_BASE = "openid-connect"
"""Host-relative path prefix of the callback route; the client name follows it."""

DEFAULT_SCOPE = "openid email"

TOKEN_TIMEOUT = httpx.Timeout(15.0, connect=3.0)
USERINFO_TIMEOUT = httpx.Timeout(30.0)

_REQUIRED_TOKEN_FIELDS = ("id_token", "access_token", "expires_in")


def decode_claims(id_token: str) -> dict[str, Any]:
    """Decode the claims segment of a compact ``header.claims.signature`` token.

    Args:
        id_token: The compact serialised token.

    Returns:
        The claims mapping.

    Raises:
        MalformedTokenError: If the token is not three segments, or the middle
            segment is not base64url-encoded JSON object.
    """
    segments = id_token.split(".")
    if len(segments) != 3:
        raise MalformedTokenError(
            f"ID token must have 3 dot-separated segments, got {len(segments)}"
        )

    claims64 = segments[1].replace("-", "+").replace("_", "/")
    claims64 += "=" * (-len(claims64) % 4)
    try:
        claims = json.loads(base64.b64decode(claims64, validate=True))
    except (binascii.Error, ValueError, RecursionError) as exc:
        raise MalformedTokenError(f"ID token payload is not valid base64url JSON: {exc}") from exc

    if not isinstance(claims, dict):
        raise MalformedTokenError(
            f"ID token payload must be a JSON object (got {type(claims).__name__})"
        )
    return claims


class OidcClient(ABC):
    """Base class for OpenID Connect clients.

    Args:
        name: Machine name; also the last segment of the callback path.
        label: Human-readable provider name.
        settings: ``client_id``, ``client_secret`` and provider-specific
            values, as a mapping or a :class:`~oidc_client.models.ClientSettings`.

    Raises:
        ConfigError: If the name or settings fail validation, or
            :meth:`validate_settings` reports problems.
    """

    provider_type: ClassVar[str] = ""

    def __init__(
        self,
        name: str,
        label: str,
        settings: Union[ClientSettings, Mapping[str, Any]],
    ) -> None:
        try:
            if not isinstance(settings, ClientSettings):
                settings = ClientSettings.model_validate(dict(settings))
            self.config = ClientConfig(
                name=name,
                label=label,
                provider=self.provider_type,
                settings=settings,
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration for client '{name}': {exc}") from exc

        errors = self.validate_settings()
        if errors:
            raise ConfigError(
                f"Invalid configuration for client '{name}': " + "; ".join(errors)
            )

    @classmethod
    def from_config(cls, config: ClientConfig) -> OidcClient:
        """Build a client from a stored :class:`~oidc_client.models.ClientConfig`."""
        return cls(config.name, config.label, config.settings)

    def __str__(self) -> str:
        return self.label

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, label={self.label!r})"

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def label(self) -> str:
        return self.config.label

    @property
    def settings(self) -> ClientSettings:
        return self.config.settings

    def get_setting(self, key: str, default: Any = None) -> Any:  # noqa: ANN401
        """Return a setting value, or *default* when it is not configured."""
        return self.settings.get(key, default)

    def validate_settings(self) -> list[str]:
        """Return human-readable problems with this client's settings.

        Called once from the constructor. The default accepts anything the
        :class:`~oidc_client.models.ClientSettings` model accepted.
        """
        return []

    @abstractmethod
    def get_endpoints(self) -> Endpoints:
        """Return the provider's authorization, token, and userinfo URLs.

        Raises:
            UnimplementedCapabilityError: When called on a provider that
                defers to this base implementation.
        """
        raise UnimplementedCapabilityError(
            f"{type(self).__name__} does not implement get_endpoints()"
        )

    # ------------------------------------------------------------------ #
    # Authorization request
    # ------------------------------------------------------------------ #

    def redirect_uri(self, context: RequestContext) -> str:
        """Return the absolute callback URL for this client."""
        return context.absolute_url(f"{REDIRECT_PATH_BASE}/{self.name}")

    def authorization_url(self, context: RequestContext, scope: str = DEFAULT_SCOPE) -> str:
        """Build the provider authorization URL with a fresh state token.

        Args:
            context: The current request context.
            scope: Space-separated scopes to request.

        Returns:
            The absolute authorization URL including its query string.

        Raises:
            UnimplementedCapabilityError: If the provider has no endpoints.
        """
        endpoints = self.get_endpoints()
        query = {
            "client_id": self.settings.client_id,
            "response_type": "code",
            "scope": scope,
            "redirect_uri": self.redirect_uri(context),
            "state": context.create_state_token(),
        }
        separator = "&" if "?" in endpoints.authorization else "?"
        return f"{endpoints.authorization}{separator}{build_query(query)}"

    def authorize(self, context: RequestContext, scope: str = DEFAULT_SCOPE) -> Any:  # noqa: ANN401
        """Send the user to the provider's authorization endpoint.

        Clears the request's ``destination`` hint, which would otherwise
        replace the authorization URL as the redirect target.

        Returns:
            Whatever ``context.redirect`` returns for the authorization URL.
        """
        url = self.authorization_url(context, scope)
        context.clear_destination()
        logger.debug("Redirecting client '%s' to %s", self.name, url)
        return context.redirect(url)

    # ------------------------------------------------------------------ #
    # Token exchange
    # ------------------------------------------------------------------ #

    def retrieve_tokens(
        self, authorization_code: str, context: RequestContext
    ) -> Union[TokenResult, RequestFailure]:
        """Exchange an authorization code for ID and access tokens.

        The ``redirect_uri`` sent here is the same one :meth:`authorize`
        sends, as the provider requires.

        Args:
            authorization_code: The ``code`` query parameter from the callback.
            context: The callback request's context.

        Returns:
            A :class:`~oidc_client.models.TokenResult` on HTTP 200 with all
            required fields, otherwise a logged
            :class:`~oidc_client.models.RequestFailure`.
        """
        operation = "retrieve_tokens"
        endpoints = self.get_endpoints()
        post_data = {
            "code": authorization_code,
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "redirect_uri": self.redirect_uri(context),
            "grant_type": "authorization_code",
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        logger.debug("POST %s for client '%s'", endpoints.token, self.name)
        try:
            response = httpx.post(
                endpoints.token,
                content=build_query(post_data),
                headers=headers,
                timeout=TOKEN_TIMEOUT,
            )
        except httpx.HTTPError as exc:
            return self._failure(operation, error=str(exc))

        if response.status_code != 200:
            return self._failure(
                operation, status_code=response.status_code, body=response.text
            )

        payload = _json_object(response)
        if payload is None:
            return self._failure(
                operation,
                kind=FailureKind.INVALID_RESPONSE,
                status_code=response.status_code,
                error="response body is not a JSON object",
                body=response.text,
            )

        missing = [
            field
            for field in _REQUIRED_TOKEN_FIELDS
            if payload.get(field) is None
        ]
        if missing:
            return self._failure(
                operation,
                kind=FailureKind.MISSING_RESPONSE_FIELDS,
                status_code=response.status_code,
                error=f"missing {', '.join(missing)}",
                body=response.text,
            )

        invalid = [
            field
            for field in ("id_token", "access_token")
            if not isinstance(payload[field], str) or not payload[field]
        ]
        expires_in = _parse_expires_in(payload["expires_in"])
        if expires_in is None:
            invalid.append("expires_in")
        if invalid:
            return self._failure(
                operation,
                kind=FailureKind.MISSING_RESPONSE_FIELDS,
                status_code=response.status_code,
                error=f"invalid {', '.join(invalid)}",
                body=response.text,
            )

        return TokenResult(
            id_token=payload["id_token"],
            access_token=payload["access_token"],
            expire=context.request_time + expires_in,
            raw=payload,
        )

    # ------------------------------------------------------------------ #
    # ID token
    # ------------------------------------------------------------------ #

    def decode_id_token(self, id_token: str) -> dict[str, Any]:
        """Return the claims of *id_token* without verifying its signature.

        Raises:
            MalformedTokenError: See :func:`decode_claims`.
        """
        return decode_claims(id_token)

    # ------------------------------------------------------------------ #
    # Userinfo
    # ------------------------------------------------------------------ #

    def retrieve_user_info(self, access_token: str) -> Union[dict[str, Any], RequestFailure]:
        """Fetch the user's claims from the provider's userinfo endpoint.

        Args:
            access_token: Access token from :meth:`retrieve_tokens`.

        Returns:
            The JSON object returned by the provider, verbatim, or a logged
            :class:`~oidc_client.models.RequestFailure`.
        """
        operation = "retrieve_user_info"
        endpoints = self.get_endpoints()
        if not access_token.isascii():
            return self._failure(operation, error="access token contains non-ASCII characters")

        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }

        logger.debug("GET %s for client '%s'", endpoints.userinfo, self.name)
        try:
            response = httpx.get(endpoints.userinfo, headers=headers, timeout=USERINFO_TIMEOUT)
        except (httpx.HTTPError, UnicodeEncodeError) as exc:
            return self._failure(operation, error=str(exc))

        if response.status_code != 200:
            return self._failure(
                operation, status_code=response.status_code, body=response.text
            )

        payload = _json_object(response)
        if payload is None:
            return self._failure(
                operation,
                kind=FailureKind.INVALID_RESPONSE,
                status_code=response.status_code,
                error="response body is not a JSON object",
                body=response.text,
            )
        return payload

    def _failure(
        self,
        operation: str,
        kind: FailureKind = FailureKind.REMOTE_REQUEST_FAILED,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        body: Optional[str] = None,
    ) -> RequestFailure:
        failure = RequestFailure(
            operation=operation,
            client_name=self.name,
            kind=kind,
            status_code=status_code,
            error=error,
            body=body,
        )
        log_request_error(failure)
        return failure


def _parse_expires_in(value: Any) -> Optional[int]:  # noqa: ANN401
    """Return ``expires_in`` as seconds; accepts an int or a digit string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return None


def _json_object(response: httpx.Response) -> Optional[dict[str, Any]]:
    """Parse *response* as a JSON object, or return ``None``."""
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
