"""Header list helpers.

A header list is the canonical representation of HTTP headers used across
HTTPill: an ordered list of ``(name, value)`` pairs. Names are compared with
exact, case-sensitive matching and duplicate names are kept in order.

Callers may also hand in a mapping of ``name -> value``; :func:`normalize`
turns it into a list of pairs following the mapping's iteration order.

Example:
    Building and querying a header list::

        headers = normalize({"Accept": "text/plain"})
        headers = put(headers, "Accept", "application/json")
        get(headers, "Accept")  # "application/json"
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

HeaderList = list[tuple[str, str]]
"""Canonical header representation: ordered ``(name, value)`` pairs."""

HeaderTypes = Union[HeaderList, Mapping[str, str], None]
"""Any header collection accepted from callers."""


def get(headers: HeaderTypes, name: str, default: Any = None) -> Any:
    """Return the value of the first header named ``name``, or ``default``."""
    for key, value in normalize(headers):
        if key == name:
            return value
    return default


def put(headers: HeaderTypes, name: str, value: str) -> HeaderList:
    """Prepend ``(name, value)`` to the header list.

    Existing headers with the same name are kept. Since :func:`get` returns
    the first match, the most recently put value wins.
    """
    return [(name, value), *normalize(headers)]


def normalize(headers: HeaderTypes) -> HeaderList:
    """Convert a header collection to a list of pairs.

    A list is returned unchanged, which makes normalization idempotent.
    """
    if headers is None:
        return []
    if isinstance(headers, Mapping):
        return list(headers.items())
    if isinstance(headers, list):
        return headers
    return [(key, value) for key, value in headers]
