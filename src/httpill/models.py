"""Request and response values.

Both are immutable: hooks and pipeline stages return modified copies made
with :func:`dataclasses.replace`.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from . import headers as header_list
from .headers import HeaderList, HeaderTypes


class Method(str, Enum):
    """HTTP methods supported by HTTPill."""

    GET = "get"
    HEAD = "head"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    OPTIONS = "options"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Form:
    """URL-encoded form body.

    Attributes:
        fields: Form fields as a mapping or a sequence of ``(key, value)`` pairs
    """

    fields: Union[Mapping[str, Any], list[tuple[str, Any]]]


@dataclass(frozen=True)
class File:
    """Body read from a file on disk."""

    path: Union[str, Path]


@dataclass(frozen=True)
class Multipart:
    """Multipart form body.

    Attributes:
        parts: ``(name, value)`` pairs for plain fields, or :class:`File`
            entries which are uploaded under the ``file`` field
    """

    parts: list[Union[tuple[str, Any], File]]


@dataclass(frozen=True)
class Stream:
    """Body sent lazily, one chunk at a time."""

    chunks: Union[Iterable[Union[bytes, str]], AsyncIterable[Union[bytes, str]]]


Body = Union[bytes, str, Mapping[str, Any], Form, File, Multipart, Stream]


@dataclass(frozen=True)
class RequestOptions:
    """Transport-related options of a request.

    Every field maps to one transport option; ``None`` means "not given".

    Attributes:
        timeout: Connect timeout in milliseconds, or "infinity"
        recv_timeout: Receive timeout in milliseconds, or "infinity"
        stream_to: Destination for asynchronous events (an ``asyncio.Queue``
            or a plain or async callable)
        async_mode: ``"once"`` to deliver one event per ``stream_next`` call
        proxy: Proxy URL, or a ``(host, port)`` tuple
        proxy_auth: ``(user, password)`` tuple for the proxy
        ssl: TLS options (``verify``, ``cacertfile``, ``certfile``, ``keyfile``)
        follow_redirect: Whether the transport follows redirects
        max_redirect: Maximum number of redirects to follow
        transport_options: Extra options passed to the transport as-is
    """

    timeout: Any = None
    recv_timeout: Any = None
    stream_to: Any = None
    async_mode: Optional[str] = None
    proxy: Any = None
    proxy_auth: Optional[tuple[str, str]] = None
    ssl: Optional[Mapping[str, Any]] = None
    follow_redirect: Optional[bool] = None
    max_redirect: Optional[int] = None
    transport_options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.async_mode not in (None, "once"):
            raise ValueError(f"Invalid async_mode {self.async_mode!r}, expected 'once' or None")


@dataclass(frozen=True)
class Request:
    """An HTTP request.

    Attributes:
        method: HTTP method
        url: Target URL; absolute once prepared
        body: Request body (see :data:`Body`)
        headers: Request headers
        params: Query parameters to append to the URL
        options: Transport options
    """

    method: Method
    url: str
    body: Any = b""
    headers: HeaderList = field(default_factory=list)
    params: Any = None
    options: RequestOptions = field(default_factory=RequestOptions)

    @classmethod
    def new(
        cls,
        method: Union[Method, str],
        url: str,
        *,
        body: Any = b"",
        headers: HeaderTypes = None,
        params: Any = None,
        **options: Any,
    ) -> Request:
        """Create a request from caller input, before any preparation.

        Raises:
            ValueError: For an unknown method or ``async_mode``
            TypeError: For an unknown option
        """
        return cls(
            method=Method(str(method).lower()),
            url=str(url),
            body=body,
            headers=header_list.normalize(headers),
            params=params,
            options=RequestOptions(**options),
        )


@dataclass(frozen=True)
class Raw:
    """Body exactly as received from the transport."""

    data: bytes


@dataclass(frozen=True)
class Decoded:
    """Body decoded from JSON."""

    value: Any


@dataclass(frozen=True)
class Response:
    """A completed HTTP response.

    Attributes:
        status_code: HTTP status code
        headers: Response headers
        body: :class:`Raw` or :class:`Decoded` body (hooks may replace it)
        request: The request that produced this response
    """

    status_code: int
    headers: HeaderList = field(default_factory=list)
    body: Any = field(default_factory=lambda: Raw(b""))
    request: Optional[Request] = field(default=None, repr=False, compare=False)
