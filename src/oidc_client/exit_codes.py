"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~oidc_client.exceptions.OidcClientError` subclass.

Example::

    $ oidc-client exchange google bad-code
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the token endpoint rejected the code
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, including configuration errors."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The provider rejected a request or returned an unusable response."""

EXIT_NOT_FOUND = 4
"""The requested client configuration does not exist."""

EXIT_MALFORMED_TOKEN = 5
"""An ID token could not be decoded."""
