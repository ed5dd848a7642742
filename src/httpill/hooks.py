"""Extension points of an HTTPill client.

Subclass :class:`Hooks` and override any method to customize a client. Every
hook receives a value and returns the (possibly replaced) value; hooks may be
plain functions or coroutines.

Example:
    Convert decoded JSON keys to upper case::

        class Shout(Hooks):
            def after_process_response(self, response):
                if isinstance(response.body, Decoded):
                    body = {k.upper(): v for k, v in response.body.value.items()}
                    return replace(response, body=Decoded(body))
                return response

        client = Client(hooks=Shout())
"""

from __future__ import annotations

import inspect
from typing import Any, Callable

from .events import AsyncEvent
from .models import Request, Response

HOOK_NAMES = (
    "before_process_request",
    "after_process_request",
    "before_process_response",
    "after_process_response",
    "process_async_response",
)


class Hooks:
    """Identity implementations of every hook."""

    def before_process_request(self, request: Request) -> Request:
        """Called with the raw request, before URL, headers and body are resolved."""
        return request

    def after_process_request(self, request: Request) -> Request:
        """Called with the fully prepared request, right before it is sent."""
        return request

    def before_process_response(self, response: Response) -> Response:
        """Called with the response as received, before body decoding."""
        return response

    def after_process_response(self, response: Response) -> Response:
        """Called with the decoded response."""
        return response

    def process_async_response(self, event: AsyncEvent) -> AsyncEvent:
        """Called with every asynchronous event before it is delivered."""
        return event


async def run_hook(hook: Callable[[Any], Any], value: Any) -> Any:
    """Call ``hook`` with ``value``, awaiting it if it is a coroutine function."""
    if inspect.iscoroutinefunction(hook):
        return await hook(value)
    return hook(value)
