"""Diagnostic logging for failed provider requests.

Every failed token exchange or userinfo fetch produces exactly one
``ERROR`` record on the ``oidc_client.diagnostics`` logger. The record
carries structured ``extra`` fields so log pipelines can key on them:

* ``operation`` -- the client method that issued the request,
* ``client_name`` -- the client's machine name,
* ``status_code`` -- HTTP status, or ``None`` on transport errors,
* ``response`` -- the raw response body, or the transport error text.
"""

from __future__ import annotations

import logging

from oidc_client.models import RequestFailure

logger = logging.getLogger(__name__)


def log_request_error(failure: RequestFailure) -> None:
    """Record a failed provider request."""
    detail = failure.body if failure.body is not None else failure.error
    logger.error(
        "%s failed for client '%s': %s",
        failure.operation,
        failure.client_name,
        detail,
        extra={
            "operation": failure.operation,
            "client_name": failure.client_name,
            "status_code": failure.status_code,
            "response": detail,
        },
    )
