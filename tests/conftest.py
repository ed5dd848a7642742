"""Test configuration and fixtures for httpill tests."""

import asyncio

import pytest

from httpill import Client, Config
from httpill.adapters import Adapter, AsyncReply, InlineReply
from httpill.errors import ConnError


class FakeAdapter(Adapter):
    """Adapter replaying canned replies and recording what it was asked to send.

    A queued reply may be an ``InlineReply``/``AsyncReply``, an exception to
    raise, or a list of notification payloads to stream for an ``AsyncReply``.
    Inline body handles are the body bytes themselves, or an exception.
    """

    name = "fake"

    def __init__(self):
        self.sent = []
        self.replies = []
        self.pulls = []
        self.fail_pull = False
        self.closed = False

    def reply(self, *replies):
        self.replies.extend(replies)
        return self

    async def issue(self, request, options):
        self.sent.append((request, options))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, list):
            for payload in reply:
                options.stream_to.put_nowait(("ref", payload))
            return AsyncReply("ref")
        return reply

    async def read_body(self, handle):
        if isinstance(handle, Exception):
            raise handle
        return handle

    async def stream_next(self, id):
        self.pulls.append(id)
        if self.fail_pull:
            raise ConnError("closed", id)

    async def aclose(self):
        self.closed = True


def ok(status=200, headers=None, body=b"response"):
    """Inline reply with a body."""
    return InlineReply(status, headers or [], body)


@pytest.fixture
def adapter():
    """Create a fake adapter."""
    return FakeAdapter()


@pytest.fixture
def client(adapter):
    """Create a client with the default configuration and a fake adapter."""
    return Client(Config(), adapter=adapter)


async def drain(queue, count, timeout=1.0):
    """Collect ``count`` items from ``queue``."""
    return [await asyncio.wait_for(queue.get(), timeout) for _ in range(count)]
