"""Local callback receiver for interactive logins.

:func:`wait_for_callback` plays the part of the host's callback route for
the ``oidc-client login`` command. It starts a temporary HTTP server on
``127.0.0.1``, optionally opens the authorization URL in the user's
browser, and waits for the provider to redirect back to the client's
callback path.

The provider must have ``http://127.0.0.1:<port>/openid-connect/<name>``
registered as an allowed redirect URI.
"""

from __future__ import annotations

import html
import threading
import time
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from oidc_client.exceptions import AuthError

DEFAULT_TIMEOUT = 120.0


def wait_for_callback(
    port: int,
    callback_path: str,
    auth_url: str,
    open_browser: bool = True,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, str]:
    """Serve *callback_path* on ``127.0.0.1:{port}`` until the provider calls it.

    Requests for other paths (favicons and the like) get a 404 and are
    otherwise ignored.

    Args:
        port: TCP port for the local server.
        callback_path: Path the provider redirects to, e.g.
            ``"/openid-connect/google"``.
        auth_url: Authorization URL to open in the browser.
        open_browser: Open *auth_url* with :mod:`webbrowser` when ``True``.
        timeout: Seconds to wait for the callback.

    Returns:
        The callback's query parameters (first value of each), which
        include ``code`` and ``state`` on success.

    Raises:
        AuthError: If the provider reports an error, the callback carries
            no code, or nothing arrives within *timeout*.
    """
    expected_path = "/" + callback_path.lstrip("/")
    result: dict[str, Any] = {"params": None}

    class CallbackHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            parsed = urlparse(self.path)
            if parsed.path != expected_path:
                self.send_error(404)
                return

            params = {key: values[0] for key, values in parse_qs(parsed.query).items()}
            result["params"] = params

            if "error" in params:
                body = f"Authorization failed: {html.escape(params['error'])}"
                if params.get("error_description"):
                    body += f" - {html.escape(params['error_description'])}"
            elif "code" in params:
                body = (
                    "Authorization successful! You can close this window "
                    "and return to the terminal."
                )
            else:
                body = "No authorization code received."

            self.send_response(200)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.end_headers()
            self.wfile.write(f"<html><body><h2>{body}</h2></body></html>".encode("utf-8"))

        def log_message(self, format: str, *args: Any) -> None:
            pass

    server = HTTPServer(("127.0.0.1", port), CallbackHandler)
    deadline = time.monotonic() + timeout

    if open_browser:
        threading.Thread(target=webbrowser.open, args=(auth_url,), daemon=True).start()

    try:
        while result["params"] is None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            server.timeout = remaining
            server.handle_request()
    finally:
        server.server_close()

    params = result["params"]
    if params is None:
        raise AuthError(f"No callback received within {int(timeout)} seconds")
    if "error" in params:
        raise AuthError(f"Authorization failed: {params['error']}")
    if not params.get("code"):
        raise AuthError("No authorization code received from callback")
    return params
