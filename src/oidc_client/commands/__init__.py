"""CLI sub-commands for oidc-client.

* :mod:`~oidc_client.commands.clients` -- the ``clients`` group.
* :mod:`~oidc_client.commands.flow` -- protocol-step commands and ``login``.
"""
