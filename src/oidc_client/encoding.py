"""Form and query-string encoding with bracketed nested keys.

:func:`build_query` flattens nested mappings and sequences into
``parent[key]=value`` pairs, the convention most OAuth2 providers and web
frameworks accept for ``application/x-www-form-urlencoded`` bodies.
:func:`parse_query` performs the inverse.

Encoding rules:

* keys and values are percent-encoded per RFC 3986 (space becomes ``%20``),
* ``/`` is left literal in values so paths stay readable,
* a ``None`` value emits the bare key with no ``=``,
* pairs appear in the mapping's insertion order.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, quote

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SUBKEY_RE = re.compile(r"\[([^\[\]]*)\]")


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        value = "1" if value else "0"
    return quote(str(value), safe="")


def build_query(query: Mapping[str, Any], parent: str = "") -> str:
    """Encode *query* as a query string.

    Args:
        query: Mapping to encode. Values may be scalars, ``None``, nested
            mappings, or lists/tuples (encoded with their index as key).
        parent: Already-encoded key prefix used while recursing.

    Returns:
        The encoded string, without a leading ``?``.

    Example::

        >>> build_query({"a": {"b": "c/d"}, "flag": None})
        'a[b]=c/d&flag'
    """
    params: list[str] = []

    for key, value in query.items():
        key = f"{parent}[{_encode(key)}]" if parent else _encode(key)

        if isinstance(value, Mapping):
            nested = build_query(value, key)
        elif isinstance(value, (list, tuple)):
            nested = build_query(dict(enumerate(value)), key)
        elif value is None:
            params.append(key)
            continue
        else:
            params.append(f"{key}={_encode(value).replace('%2F', '/')}")
            continue

        if nested:
            params.append(nested)

    return "&".join(params)


def parse_query(qs: str) -> dict[str, Any]:
    """Decode a query string produced by :func:`build_query` into nested dicts.

    Bracketed keys (``a[b][c]=v``) become nested dictionaries. Sequence
    indices are kept as string keys. Bare keys decode to ``""``.

    Args:
        qs: The query string, with or without a leading ``?``.

    Returns:
        The decoded mapping.
    """
    result: dict[str, Any] = {}
    for raw_key, value in parse_qsl(qs.lstrip("?"), keep_blank_values=True):
        match = _KEY_RE.match(raw_key)
        if match is None:
            result[raw_key] = value
            continue
        path = [match.group(1), *_SUBKEY_RE.findall(match.group(2))]

        node = result
        for segment in path[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[path[-1]] = value

    return result
