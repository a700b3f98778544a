"""Canonical Pydantic models shared across all oidc_client modules.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ClientSettings`, :class:`ClientConfig`, :class:`GlobalConfig`.

**Protocol models** -- produced per request by the client operations:
    :class:`Endpoints`, :class:`TokenResult`, :class:`RequestFailure`,
    :class:`Redirect`.

Configuration models are frozen: a client's settings never change after the
client is constructed. :class:`ClientSettings` accepts provider-specific keys
beyond ``client_id`` and ``client_secret``; they are preserved in
``model_extra``.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Client configuration ---


class ClientSettings(BaseModel):
    """Credentials and provider-specific values for one client.

    Example::

        ClientSettings(
            client_id="abc.apps.example.com",
            client_secret="s3cret",
            authorization_endpoint="https://idp.example.com/authorize",
        )
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    client_id: str = Field(min_length=1, description="OAuth2 client identifier")
    client_secret: str = Field(description="OAuth2 client secret")

    def get(self, key: str, default: Any = None) -> Any:
        """Return a declared or provider-specific setting, or *default*."""
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)


class ClientConfig(BaseModel):
    """A named, labelled client bound to one provider type.

    ``name`` doubles as the callback path segment, so it is restricted to
    lowercase machine-name characters.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(pattern=r"^[a-z0-9_-]+$", description="Machine name")
    label: str = Field(description="Human-readable name")
    provider: str = Field(default="generic", description="Provider type: generic, google")
    settings: ClientSettings


class GlobalConfig(BaseModel):
    """Defaults shared by all CLI invocations."""

    base_url: Optional[str] = Field(
        default=None, description="Absolute base URL the redirect path is appended to"
    )
    scope: str = Field(default="openid email", description="Default requested scope")


# --- Protocol values ---


class Endpoints(BaseModel):
    """Provider endpoint URLs."""

    authorization: str
    token: str
    userinfo: str


class TokenResult(BaseModel):
    """Tokens obtained from a successful code exchange.

    ``expire`` is an absolute epoch timestamp: the request time plus the
    provider-reported ``expires_in``.
    """

    id_token: str
    access_token: str
    expire: int
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)


class FailureKind(str, enum.Enum):
    """Why a remote operation produced no usable result."""

    REMOTE_REQUEST_FAILED = "remote_request_failed"
    MISSING_RESPONSE_FIELDS = "missing_response_fields"
    INVALID_RESPONSE = "invalid_response"


class RequestFailure(BaseModel):
    """Returned instead of a payload when a token or userinfo request fails.

    Carries enough context to log and diagnose the failure: the operation
    and client that issued the request, plus whatever the transport or the
    provider reported.
    """

    operation: str
    client_name: str
    kind: FailureKind = FailureKind.REMOTE_REQUEST_FAILED
    status_code: Optional[int] = None
    error: Optional[str] = None
    body: Optional[str] = None

    def describe(self) -> str:
        """Return a one-line summary suitable for logs and error messages."""
        parts = [self.kind.value]
        if self.status_code is not None:
            parts.append(f"HTTP {self.status_code}")
        if self.error:
            parts.append(self.error)
        return f"{self.operation} failed for client '{self.client_name}': {', '.join(parts)}"

    def to_error(self):  # noqa: ANN201
        """Return a :class:`~oidc_client.exceptions.RemoteRequestError` for this failure."""
        from oidc_client.exceptions import RemoteRequestError

        return RemoteRequestError(self)


class Redirect(BaseModel):
    """An HTTP redirect the host should issue."""

    url: str
    status_code: int = 302
