"""Request context -- the host web framework as seen by an OIDC client.

Client operations never read ambient request state. Instead the host passes
a :class:`RequestContext` that knows how to:

* build absolute URLs from the host's scheme and domain,
* mint and verify anti-CSRF state tokens,
* read and clear the post-login ``destination`` hint,
* turn a URL into a redirect response.

:class:`LocalRequestContext` is a complete in-process implementation used by
the CLI and the test suite. Web frameworks subclass :class:`RequestContext`
(or :class:`LocalRequestContext`) and override :meth:`~RequestContext.redirect`
to return their own response type.
"""

from __future__ import annotations

import secrets
import time
from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import urljoin

from oidc_client.models import Redirect


class RequestContext(ABC):
    """Host collaborators for a single incoming request.

    Args:
        request_time: Epoch seconds at which the request started. Token
            expiry is computed from this value. Defaults to now.
    """

    def __init__(self, request_time: Optional[int] = None) -> None:
        self.request_time = int(time.time()) if request_time is None else request_time

    @abstractmethod
    def absolute_url(self, path: str) -> str:
        """Return the absolute URL for a host-relative *path*."""
        ...

    @abstractmethod
    def create_state_token(self) -> str:
        """Return a fresh, unguessable state token for one authorization attempt."""
        ...

    @abstractmethod
    def verify_state_token(self, token: str) -> bool:
        """Return ``True`` if *token* was issued by :meth:`create_state_token`."""
        ...

    @property
    @abstractmethod
    def destination(self) -> Optional[str]:
        """The post-login destination hint carried by the current request."""
        ...

    @abstractmethod
    def clear_destination(self) -> None:
        """Drop the destination hint so it cannot override the redirect target."""
        ...

    def redirect(self, url: str) -> Any:  # noqa: ANN401
        """Return the redirect the host should send for *url*.

        The default returns a :class:`~oidc_client.models.Redirect`; web
        frameworks override this to build their own response object.
        """
        return Redirect(url=url)


class LocalRequestContext(RequestContext):
    """In-process request context backed by a base URL and a query mapping.

    State tokens are kept in memory and are single use.

    Args:
        base_url: Absolute URL of the host, e.g. ``"https://app.example.com/"``.
        query: Query parameters of the current request (may carry
            ``destination``). Copied, never mutated in place.
        request_time: See :class:`RequestContext`.

    Example::

        context = LocalRequestContext("http://127.0.0.1:8400/")
        context.absolute_url("openid-connect/google")
        # 'http://127.0.0.1:8400/openid-connect/google'
    """

    def __init__(
        self,
        base_url: str,
        query: Optional[dict[str, str]] = None,
        request_time: Optional[int] = None,
    ) -> None:
        super().__init__(request_time)
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.query: dict[str, str] = dict(query or {})
        self._issued_states: set[str] = set()

    def absolute_url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def create_state_token(self) -> str:
        token = secrets.token_urlsafe(32)
        self._issued_states.add(token)
        return token

    def verify_state_token(self, token: str) -> bool:
        if token in self._issued_states:
            self._issued_states.discard(token)
            return True
        return False

    @property
    def destination(self) -> Optional[str]:
        return self.query.get("destination")

    def clear_destination(self) -> None:
        self.query.pop("destination", None)
