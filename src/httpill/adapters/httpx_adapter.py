"""Transport adapter built on ``httpx.AsyncClient``."""

from __future__ import annotations

import asyncio
import ssl
from collections.abc import AsyncIterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlencode
from uuid import uuid4

import httpx
from loguru import logger

from .. import headers as header_list
from ..errors import ConnError
from ..headers import HeaderList
from ..models import File, Form, Method, Multipart, Request, Stream
from .base import Adapter, AsyncReply, InlineReply, Reply, TransportOptions, register_adapter

DEFAULT_CONNECT_TIMEOUT = 8000
DEFAULT_RECV_TIMEOUT = 5000
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class _Exchange:
    """State of one streaming exchange."""

    id: Any
    client: httpx.AsyncClient
    response: httpx.Response
    once: bool
    pulls: asyncio.Semaphore


def _seconds(milliseconds: Any, default: float) -> Optional[float]:
    if milliseconds is None:
        milliseconds = default
    if milliseconds == "infinity":
        return None
    return milliseconds / 1000


def _proxy(options: TransportOptions) -> Optional[httpx.Proxy]:
    proxy = options.proxy
    if proxy is None:
        return None
    if isinstance(proxy, tuple):
        host, port = proxy
        proxy = f"http://{host}:{port}"
    return httpx.Proxy(proxy, auth=options.proxy_auth)


def _verify(ssl_options: Optional[Mapping[str, Any]]) -> Any:
    """Translate TLS options into an ``httpx`` ``verify`` value.

    Recognized keys: ``verify`` (bool), ``cacertfile``, ``certfile`` and
    ``keyfile``.
    """
    if not ssl_options:
        return True
    if not ssl_options.get("verify", True):
        return False
    context = ssl.create_default_context(cafile=ssl_options.get("cacertfile"))
    if ssl_options.get("certfile"):
        context.load_cert_chain(ssl_options["certfile"], ssl_options.get("keyfile"))
    return context


def _headers(response: httpx.Response) -> HeaderList:
    return [(k.decode("latin-1"), v.decode("latin-1")) for k, v in response.headers.raw]


def _has_header(headers: HeaderList, name: str) -> bool:
    return any(key.lower() == name.lower() for key, _ in headers)


async def _chunks(chunks: Any):
    """Yield stream body chunks as bytes."""
    if isinstance(chunks, AsyncIterable):
        async for chunk in chunks:
            yield chunk.encode() if isinstance(chunk, str) else chunk
    else:
        for chunk in chunks:
            yield chunk.encode() if isinstance(chunk, str) else chunk


def _body_arguments(body: Any, headers: HeaderList) -> tuple[dict[str, Any], HeaderList]:
    """Return ``build_request`` keyword arguments for ``body`` and the final headers.

    A mapping body reaches the transport only when it was not JSON-encoded
    (no JSON ``Content-Type``, or a value JSON cannot represent). It is sent
    form-encoded with each value converted by ``str``, and the request
    headers are left as they are, so they may still declare JSON.
    """
    if isinstance(body, (bytes, str)):
        return {"content": body}, headers
    if isinstance(body, Form):
        if not _has_header(headers, "Content-Type"):
            headers = header_list.put(headers, "Content-Type", FORM_CONTENT_TYPE)
        fields = body.fields.items() if isinstance(body.fields, Mapping) else body.fields
        return {"content": urlencode(list(fields), doseq=True)}, headers
    if isinstance(body, File):
        return {"content": Path(body.path).read_bytes()}, headers
    if isinstance(body, Multipart):
        data: dict[str, list[Any]] = {}
        files = []
        for part in body.parts:
            if isinstance(part, File):
                path = Path(part.path)
                files.append(("file", (path.name, path.read_bytes())))
            else:
                name, value = part
                data.setdefault(name, []).append(value)
        return {"data": data, "files": files}, headers
    if isinstance(body, Stream):
        return {"content": _chunks(body.chunks)}, headers
    if isinstance(body, Mapping):
        return {"data": dict(body)}, headers
    return {"content": body}, headers


class HttpxAdapter(Adapter):
    """Adapter issuing requests through ``httpx``.

    A fresh ``httpx.AsyncClient`` is used per exchange, since proxy, TLS and
    redirect limits are client settings in ``httpx``. Entries of
    ``TransportOptions.extra`` are passed to the client constructor (e.g.
    ``auth`` or ``cookies``). Mapping bodies that could not be JSON-encoded
    are sent form-encoded without touching ``Content-Type``.

    Args:
        transport: Optional ``httpx`` transport, mostly for tests
    """

    name = "httpx"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self._exchanges: dict[Any, _Exchange] = {}
        self._tasks: set[asyncio.Task] = set()

    def _client(self, options: TransportOptions) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {
            "timeout": httpx.Timeout(
                DEFAULT_RECV_TIMEOUT / 1000,
                connect=_seconds(options.connect_timeout, DEFAULT_CONNECT_TIMEOUT),
                read=_seconds(options.recv_timeout, DEFAULT_RECV_TIMEOUT),
            ),
            "verify": _verify(options.ssl_options),
        }
        proxy = _proxy(options)
        if proxy is not None:
            kwargs["proxy"] = proxy
        if options.max_redirect is not None:
            kwargs["max_redirects"] = options.max_redirect
        if self._transport is not None:
            kwargs["transport"] = self._transport
        kwargs.update(options.extra)
        return httpx.AsyncClient(**kwargs)

    async def issue(self, request: Request, options: TransportOptions) -> Reply:
        streaming = options.stream_to is not None
        client = self._client(options)
        try:
            body_kwargs, headers = _body_arguments(request.body, request.headers)
            http_request = client.build_request(
                str(request.method).upper(), request.url, headers=headers, **body_kwargs
            )
            # Streaming exchanges report redirects instead of following them
            follow = bool(options.follow_redirect) and not streaming
            response = await client.send(http_request, stream=True, follow_redirects=follow)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, OSError) as e:
            await client.aclose()
            raise ConnError(e) from e

        if streaming:
            return self._start_exchange(client, response, options)

        if request.method is Method.HEAD:
            await response.aclose()
            await client.aclose()
            return InlineReply(response.status_code, _headers(response))
        return InlineReply(response.status_code, _headers(response), (client, response))

    async def read_body(self, handle: Any) -> bytes:
        client, response = handle
        try:
            return await response.aread()
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise ConnError(e) from e
        finally:
            await response.aclose()
            await client.aclose()

    async def stream_next(self, id: Any) -> None:
        exchange = self._exchanges.get(id)
        if exchange is None:
            raise ConnError("stream_next failed", id)
        if exchange.once:
            exchange.pulls.release()

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _start_exchange(
        self, client: httpx.AsyncClient, response: httpx.Response, options: TransportOptions
    ) -> AsyncReply:
        exchange = _Exchange(
            id=uuid4(),
            client=client,
            response=response,
            once=options.once,
            pulls=asyncio.Semaphore(1),
        )
        self._exchanges[exchange.id] = exchange
        task = asyncio.create_task(
            self._pump(exchange, options.stream_to, bool(options.follow_redirect))
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return AsyncReply(exchange.id)

    async def _pump(self, exchange: _Exchange, inbox: asyncio.Queue, follow_redirect: bool) -> None:
        """Push the notifications of ``exchange`` to ``inbox``."""

        async def notify(payload: Any) -> None:
            if exchange.once:
                await exchange.pulls.acquire()
            await inbox.put((exchange.id, payload))

        response = exchange.response
        try:
            if follow_redirect and response.has_redirect_location:
                tag = "see_other" if response.status_code == 303 else "redirect"
                if response.next_request is not None:
                    location = str(response.next_request.url)
                else:
                    location = response.headers["location"]
                await notify((tag, location, _headers(response)))
                return

            await notify(("status", response.status_code, response.reason_phrase))
            await notify(("headers", _headers(response)))
            async for chunk in response.aiter_bytes():
                if chunk:
                    await notify(chunk)
            await notify("done")
        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.debug(f"Exchange {exchange.id} failed: {e!r}")
            await inbox.put((exchange.id, ("error", e)))
        finally:
            self._exchanges.pop(exchange.id, None)
            await response.aclose()
            await exchange.client.aclose()


register_adapter(HttpxAdapter.name, HttpxAdapter)
