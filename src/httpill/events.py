"""Typed events delivered for asynchronous (streaming) exchanges.

Every event carries the correlation ``id`` of the exchange it belongs to.
An exchange delivers, in transport order, any number of :class:`AsyncStatus`,
:class:`AsyncHeaders` and :class:`AsyncChunk` events followed by exactly one
terminal value: :class:`AsyncEnd`, :class:`AsyncRedirect` or a
:class:`~httpill.errors.ConnError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .headers import HeaderList


@dataclass(frozen=True)
class AsyncResponse:
    """Handle returned for a request whose response is streamed."""

    id: Any


@dataclass(frozen=True)
class AsyncStatus:
    id: Any
    code: int


@dataclass(frozen=True)
class AsyncHeaders:
    id: Any
    headers: HeaderList = field(default_factory=list)


@dataclass(frozen=True)
class AsyncChunk:
    id: Any
    chunk: bytes


@dataclass(frozen=True)
class AsyncRedirect:
    id: Any
    to: str
    headers: HeaderList = field(default_factory=list)


@dataclass(frozen=True)
class AsyncEnd:
    id: Any


AsyncEvent = Union[AsyncStatus, AsyncHeaders, AsyncChunk, AsyncRedirect, AsyncEnd]

TERMINAL_EVENTS = (AsyncRedirect, AsyncEnd)
