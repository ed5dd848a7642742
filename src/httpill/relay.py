"""Relay of transport notifications to a caller-chosen destination.

A :class:`Relay` owns the inbox of one asynchronous exchange. The transport
puts ``(id, payload)`` notifications on :attr:`Relay.inbox`; the relay turns
each one into a typed event, runs the ``process_async_response`` hook on it
and delivers it to the destination, one at a time and in inbox order.

Notification payloads:

======================================  =====================================
payload                                 delivered value
======================================  =====================================
``("status", code, reason)``            :class:`AsyncStatus`
``("headers", headers)``                :class:`AsyncHeaders`
``("redirect" | "see_other", to, h)``   :class:`AsyncRedirect` (terminal)
``"done"``                              :class:`AsyncEnd` (terminal)
``("error", reason)``                   :class:`ConnError` (terminal, no hook)
anything else (``bytes``)               :class:`AsyncChunk`
======================================  =====================================

A destination is an ``asyncio.Queue`` or a plain or async callable.
"""

from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from typing import Any, Callable, Optional

from loguru import logger

from . import headers as header_list
from .errors import ConnError
from .events import (
    TERMINAL_EVENTS,
    AsyncChunk,
    AsyncEnd,
    AsyncHeaders,
    AsyncRedirect,
    AsyncStatus,
)
from .hooks import run_hook

REDIRECT_TAGS = ("redirect", "see_other")


class RelayState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"
    FAILED = "failed"


def check_destination(destination: Any) -> None:
    """Raise ``TypeError`` if events cannot be delivered to ``destination``."""
    if not (isinstance(destination, asyncio.Queue) or callable(destination)):
        raise TypeError(
            f"stream_to must be an asyncio.Queue or a callable, got {type(destination).__name__}"
        )


async def deliver(destination: Any, item: Any) -> None:
    """Deliver ``item`` to ``destination``."""
    if isinstance(destination, asyncio.Queue):
        await destination.put(item)
    elif inspect.iscoroutinefunction(destination):
        await destination(item)
    else:
        destination(item)


def to_event(id: Any, payload: Any) -> Any:
    """Map one transport notification payload to an event or a ``ConnError``."""
    if payload == "done":
        return AsyncEnd(id)
    if isinstance(payload, tuple) and payload:
        tag = payload[0]
        if tag == "status":
            return AsyncStatus(id, payload[1])
        if tag == "headers":
            return AsyncHeaders(id, header_list.normalize(payload[1]))
        if tag == "error":
            return ConnError(payload[1], id)
        if tag in REDIRECT_TAGS and len(payload) == 3:
            return AsyncRedirect(id, payload[1], header_list.normalize(payload[2]))
    return AsyncChunk(id, payload)


class Relay:
    """Maps and forwards the notifications of one asynchronous exchange.

    The relay terminates after delivering an :class:`AsyncEnd`, an
    :class:`AsyncRedirect` or a :class:`ConnError`; no value is delivered
    after that. A failing ``process`` hook or destination ends the exchange
    with a :class:`ConnError` carrying the raised exception.
    """

    def __init__(self, destination: Any, process: Optional[Callable[[Any], Any]] = None):
        check_destination(destination)
        self.destination = destination
        self.process = process or (lambda event: event)
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.state = RelayState.IDLE
        self.id: Any = None

    @property
    def terminated(self) -> bool:
        return self.state in (RelayState.ENDED, RelayState.FAILED)

    async def run(self) -> RelayState:
        """Receive notifications until the exchange terminates."""
        self.state = RelayState.ACTIVE
        logger.debug(f"Relay started for destination {self.destination!r}")
        while self.state is RelayState.ACTIVE:
            id, payload = await self.inbox.get()
            await self.handle(id, payload)
        logger.debug(f"Relay for exchange {self.id} finished: {self.state.value}")
        return self.state

    async def handle(self, id: Any, payload: Any) -> None:
        """Process a single notification."""
        if self.terminated:
            return
        if self.id is None:
            self.id = id
        elif id != self.id:
            logger.warning(f"Relay for exchange {self.id} ignored a notification for {id}")
            return

        event = to_event(id, payload)
        if isinstance(event, ConnError):
            await self._fail(event)
            return

        try:
            await deliver(self.destination, await run_hook(self.process, event))
        except Exception as e:
            logger.opt(exception=e).error(f"Relay for exchange {self.id} failed to deliver {event!r}")
            await self._fail(ConnError(e, self.id))
            return
        if isinstance(event, TERMINAL_EVENTS):
            self.state = RelayState.ENDED

    async def _fail(self, error: ConnError) -> None:
        # If the destination cannot take the error either, it propagates out of run()
        self.state = RelayState.FAILED
        await deliver(self.destination, error)
