"""HTTPill clients: request orchestration and the client extension mechanism."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator
from typing import Any, Callable, Optional, Union

from loguru import logger

from .adapters import Adapter, AsyncReply, TransportOptions, get_adapter
from .config import Config, load_config
from .errors import ConnError, StatusError
from .events import AsyncEvent, AsyncResponse
from .handling import Outcome, Result, accepts_of, decode_body, wrap, wrap_error
from .hooks import HOOK_NAMES, Hooks, run_hook
from .models import Method, Raw, Request, Response
from .preparation import prepare
from .relay import Relay


def unwrap(result: Any) -> Any:
    """Return the value of a successful result, raising for failures.

    Raises:
        ConnError: For connection errors, wrapped or bare
        StatusError: For ``("status_error", response)`` results
    """
    if isinstance(result, ConnError):
        raise result
    if isinstance(result, Result):
        if result.outcome is Outcome.OK:
            return result.value
        if result.outcome is Outcome.STATUS_ERROR:
            raise StatusError(result.value)
        raise result.value
    return result


class Client:
    """HTTP client built from a configuration, hooks and a transport adapter.

    Every request goes through the same steps: the request is built and
    prepared (query string, URL, headers, body), transport options are
    derived from the request options, the adapter sends it, and its reply is
    turned into a :class:`Response` (or an :class:`AsyncResponse` for
    streamed requests) returned according to the configured
    ``response_handling_method``.

    Args:
        config: Client configuration (default: loaded for ``name``)
        hooks: Hook implementations (default: identity hooks)
        adapter: Adapter instance or registered name, overriding
            ``config.adapter``
        name: Client name, used in logs and to select environment variables

    Example:
        Issue a request and inspect the result::

            async with Client(load_config(base_url="https://httpbin.org")) as client:
                outcome, response = await client.get("get", params={"q": "pill"})
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        hooks: Optional[Hooks] = None,
        adapter: Union[Adapter, str, None] = None,
        *,
        name: str = "default",
    ):
        self.name = name
        self.config = config if config is not None else load_config(name)
        self.hooks = hooks if hooks is not None else Hooks()
        self.adapter = get_adapter(adapter if adapter is not None else self.config.adapter)
        self._relays: set[asyncio.Task] = set()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Stop running relays and close the adapter."""
        for task in list(self._relays):
            task.cancel()
        if self._relays:
            await asyncio.gather(*self._relays, return_exceptions=True)
        await self.adapter.aclose()

    async def build_request(self, method: Union[Method, str], url: str, **options: Any) -> Request:
        """Build a prepared request, running the request hooks around preparation."""
        request = Request.new(method, url, **options)
        request = await run_hook(self.hooks.before_process_request, request)
        request = prepare(request, self.config)
        return await run_hook(self.hooks.after_process_request, request)

    async def request(self, method: Union[Method, str], url: str, **options: Any) -> Any:
        """Issue an HTTP request.

        Args:
            method: HTTP method ("get", "post", ...)
            url: Target URL, relative to ``base_url`` when one is configured
            **options: ``body``, ``headers``, ``params`` and the transport
                options of :class:`~httpill.models.RequestOptions`

        Returns:
            The response, async handle or connection error, shaped by the
            ``response_handling_method`` policy. Never raises for transport
            failures or error status codes.
        """
        request = await self.build_request(method, url, **options)
        relay = None
        if request.options.stream_to is not None:
            relay = Relay(request.options.stream_to, self.hooks.process_async_response)
        return await self._issue(request, relay)

    async def request_or_raise(self, method: Union[Method, str], url: str, **options: Any) -> Any:
        """Like :meth:`request`, but return the bare value and raise on failure.

        Raises:
            ConnError: If the transport fails
            StatusError: For status codes of 400 and above under the
                ``status_error`` policy
        """
        return unwrap(await self.request(method, url, **options))

    async def stream_next(self, response: AsyncResponse) -> Any:
        """Ask the transport for the next event of an ``async_mode="once"`` exchange.

        Returns:
            ``response`` on success or a connection error, shaped by the
            ``response_handling_method`` policy
        """
        policy = self.config.response_handling_method
        try:
            await self.adapter.stream_next(response.id)
        except ConnError as e:
            logger.debug(f"stream_next failed for exchange {response.id}: {e.reason!r}")
            return wrap_error(ConnError("stream_next failed", response.id), policy)
        return wrap(response, policy)

    async def stream(
        self, method: Union[Method, str], url: str, **options: Any
    ) -> AsyncIterator[AsyncEvent]:
        """Issue a streamed request and iterate over its events.

        Iteration stops after the terminal event. With ``async_mode="once"``
        the next event is pulled each time one is consumed.

        Raises:
            ConnError: If the transport fails, before or during the exchange
        """
        queue: asyncio.Queue = asyncio.Queue()
        request = await self.build_request(method, url, stream_to=queue, **options)
        relay = Relay(queue, self.hooks.process_async_response)
        handle = unwrap(await self._issue(request, relay))
        once = request.options.async_mode == "once"

        while True:
            item = await queue.get()
            if isinstance(item, ConnError):
                raise item
            yield item
            if relay.terminated and queue.empty():
                return
            if once:
                unwrap(await self.stream_next(handle))

    async def _issue(self, request: Request, relay: Optional[Relay]) -> Any:
        policy = self.config.response_handling_method
        transport_options = TransportOptions.from_request_options(
            request.options, relay.inbox if relay is not None else None
        )

        logger.debug(
            f"HTTP request started - client {self.name} - method {request.method} {request.url}"
        )
        logger.debug(f"HTTP request body: {request.body!r}")
        start = time.monotonic()

        try:
            result = await self._exchange(request, transport_options, relay)
        except ConnError as e:
            result = wrap_error(e, policy)

        duration = round((time.monotonic() - start) * 1000)
        logger.debug(
            f"HTTP request ended - client {self.name} - method {request.method} "
            f"{request.url} time={duration}ms"
        )
        return result

    async def _exchange(
        self, request: Request, options: TransportOptions, relay: Optional[Relay]
    ) -> Any:
        policy = self.config.response_handling_method
        reply = await self.adapter.issue(request, options)

        if isinstance(reply, AsyncReply):
            self._start_relay(relay)
            return wrap(AsyncResponse(reply.id), policy)

        body = b""
        if reply.body_handle is not None:
            body = await self.adapter.read_body(reply.body_handle)

        response = Response(
            status_code=reply.status, headers=reply.headers, body=Raw(body), request=request
        )
        response = await run_hook(self.hooks.before_process_response, response)
        response = decode_body(response, accepts_of(request))
        response = await run_hook(self.hooks.after_process_response, response)
        return wrap(response, policy)

    def _start_relay(self, relay: Relay) -> None:
        task = asyncio.create_task(relay.run())
        self._relays.add(task)
        task.add_done_callback(self._relay_done)

    def _relay_done(self, task: asyncio.Task) -> None:
        self._relays.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error(
                f"Relay of client {self.name} stopped with an error"
            )

    # Convenience methods
    async def get(self, url: str, **options: Any) -> Any:
        """Issue a GET request."""
        return await self.request(Method.GET, url, **options)

    async def head(self, url: str, **options: Any) -> Any:
        """Issue a HEAD request."""
        return await self.request(Method.HEAD, url, **options)

    async def post(self, url: str, **options: Any) -> Any:
        """Issue a POST request."""
        return await self.request(Method.POST, url, **options)

    async def put(self, url: str, **options: Any) -> Any:
        """Issue a PUT request."""
        return await self.request(Method.PUT, url, **options)

    async def patch(self, url: str, **options: Any) -> Any:
        """Issue a PATCH request."""
        return await self.request(Method.PATCH, url, **options)

    async def delete(self, url: str, **options: Any) -> Any:
        """Issue a DELETE request."""
        return await self.request(Method.DELETE, url, **options)

    async def options(self, url: str, **options: Any) -> Any:
        """Issue an OPTIONS request."""
        return await self.request(Method.OPTIONS, url, **options)

    async def get_or_raise(self, url: str, **options: Any) -> Any:
        return await self.request_or_raise(Method.GET, url, **options)

    async def head_or_raise(self, url: str, **options: Any) -> Any:
        return await self.request_or_raise(Method.HEAD, url, **options)

    async def post_or_raise(self, url: str, **options: Any) -> Any:
        return await self.request_or_raise(Method.POST, url, **options)

    async def put_or_raise(self, url: str, **options: Any) -> Any:
        return await self.request_or_raise(Method.PUT, url, **options)

    async def patch_or_raise(self, url: str, **options: Any) -> Any:
        return await self.request_or_raise(Method.PATCH, url, **options)

    async def delete_or_raise(self, url: str, **options: Any) -> Any:
        return await self.request_or_raise(Method.DELETE, url, **options)

    async def options_or_raise(self, url: str, **options: Any) -> Any:
        return await self.request_or_raise(Method.OPTIONS, url, **options)


def http_client(
    name: Optional[str] = None,
    *,
    adapter: Union[Adapter, str, None] = None,
    base_url: Optional[str] = None,
    request_headers: Any = None,
    response_handling_method: Optional[str] = None,
) -> Callable[[type], Client]:
    """Decorator turning a class into a configured :class:`Client`.

    Configuration is read, in increasing priority, from class attributes of
    the same name, the decorator arguments and ``HTTPILL_<NAME>_*``
    environment variables. Methods named after hooks (see
    :class:`~httpill.hooks.Hooks`) replace the default hooks.

    Args:
        name: Client name (default: the class name)
        adapter: Adapter instance or registered name
        base_url: Prefix for every request URL
        request_headers: Headers added to every request
        response_handling_method: "conn_error", "status_error" or "no_tuple"

    Example:
        Define a GitHub client::

            @http_client("github", base_url="https://api.github.com")
            class GitHub:
                request_headers = [("Accept", "application/vnd.github+json")]

                def after_process_response(self, response):
                    return replace(response, body=response.body.value)

            outcome, response = await GitHub.get("users/octocat/orgs")
    """
    arguments = {
        "adapter": adapter,
        "base_url": base_url,
        "request_headers": request_headers,
        "response_handling_method": response_handling_method,
    }

    def decorator(cls: type) -> Client:
        client_name = name or cls.__name__
        options = {field: getattr(cls, field) for field in Config.model_fields if hasattr(cls, field)}
        options.update({key: value for key, value in arguments.items() if value is not None})

        hooks_class = cls if issubclass(cls, Hooks) else type(cls.__name__, (cls, Hooks), {})
        hooks = hooks_class()
        overridden = [hook for hook in HOOK_NAMES if hasattr(cls, hook)]
        logger.debug(f"Registered HTTP client {client_name} with hooks {overridden}")

        return Client(load_config(client_name, **options), hooks=hooks, name=client_name)

    return decorator
