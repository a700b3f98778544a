"""Exception hierarchy for oidc_client.

All exceptions inherit from :class:`OidcClientError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oidc_client.exit_codes`.
The CLI entry point :func:`oidc_client.app.main` catches ``OidcClientError``
and exits with the appropriate code.

Remote failures during token exchange and userinfo fetch are *not* raised
by the client; they are returned as :class:`~oidc_client.models.RequestFailure`
values. :class:`RemoteRequestError` exists for callers that want to turn
such a value into an exception (see
:meth:`~oidc_client.models.RequestFailure.to_error`).

Subclass hierarchy::

    OidcClientError (exit 1)
    +-- InvalidUsageError              (exit 2)
    +-- AuthError                      (exit 3)
    |   +-- RemoteRequestError         (exit 3)
    +-- NotFoundError                  (exit 4)
    +-- MalformedTokenError            (exit 5)
    +-- ConfigError                    (exit 1)
        +-- UnimplementedCapabilityError
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from oidc_client.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MALFORMED_TOKEN,
    EXIT_NOT_FOUND,
)

if TYPE_CHECKING:
    from oidc_client.models import RequestFailure


class OidcClientError(Exception):
    """Base exception for all oidc_client errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(OidcClientError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(OidcClientError):
    """Raised when an authentication step fails (state mismatch, provider error)."""

    exit_code = EXIT_AUTH_FAILURE


class RemoteRequestError(AuthError):
    """Raised from a :class:`~oidc_client.models.RequestFailure` on request.

    Args:
        failure: The failure value returned by the client operation.
    """

    def __init__(self, failure: RequestFailure):
        super().__init__(failure.describe())
        self.failure = failure


class NotFoundError(OidcClientError):
    """Raised when a named client configuration does not exist."""

    exit_code = EXIT_NOT_FOUND


class MalformedTokenError(OidcClientError):
    """Raised when an ID token is not three segments or its payload is not a JSON object."""

    exit_code = EXIT_MALFORMED_TOKEN


class ConfigError(OidcClientError):
    """Raised for configuration problems (invalid settings, unknown provider, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class UnimplementedCapabilityError(ConfigError):
    """Raised when a provider does not supply its endpoint URLs."""
