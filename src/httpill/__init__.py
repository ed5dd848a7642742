"""HTTP requests for sick people.

HTTPill is a thin, configurable layer over an HTTP transport (``httpx`` by
default). It shapes requests and responses and leaves connections, TLS,
proxies and redirects to the transport.

Key Features:
    - Automatic ``Content-Type`` for structured (mapping) bodies
    - JSON encoding of request bodies and decoding of response bodies driven
      by the ``Content-Type`` and ``Accepts`` headers
    - Response handling policies: ``("ok", response)`` tuples,
      ``("status_error", response)`` for status codes of 400 and above, or
      bare values
    - Streamed responses delivered as typed events to an ``asyncio.Queue``
      or a callback, continuously or one at a time
    - Hooks around request and response processing
    - Per-client defaults (``base_url``, ``request_headers``, ...) overridable
      from the environment

Quick Start:
    Basic usage example::

        import httpill

        outcome, response = await httpill.get("httpbin.org/get", params={"a": "1"})

    Define your own client::

        from httpill import http_client

        @http_client("github", base_url="https://api.github.com")
        class GitHub:
            request_headers = [("Accepts", "application/json")]

        response = await GitHub.get_or_raise("users/octocat/orgs")

    Stream a response::

        async for event in httpill.default_client().stream("get", "httpbin.org/stream/3"):
            print(event)

See Also:
    - Client: Request orchestration
    - Config: Client configuration
    - Hooks: Extension points
"""

from .adapters import Adapter, HttpxAdapter, TransportOptions, register_adapter
from .api import (
    default_client,
    delete,
    delete_or_raise,
    get,
    get_or_raise,
    head,
    head_or_raise,
    options,
    options_or_raise,
    patch,
    patch_or_raise,
    post,
    post_or_raise,
    put,
    put_or_raise,
    request,
    request_or_raise,
    set_default_client,
    stream_next,
)
from .client import Client, http_client, unwrap
from .config import Config, load_config
from .errors import ConfigurationError, ConnError, HTTPillError, StatusError
from .events import (
    AsyncChunk,
    AsyncEnd,
    AsyncEvent,
    AsyncHeaders,
    AsyncRedirect,
    AsyncResponse,
    AsyncStatus,
)
from .handling import Outcome, ResponseHandling, Result
from .hooks import Hooks
from .models import (
    Decoded,
    File,
    Form,
    Method,
    Multipart,
    Raw,
    Request,
    RequestOptions,
    Response,
    Stream,
)

__all__ = [
    "Adapter",
    "AsyncChunk",
    "AsyncEnd",
    "AsyncEvent",
    "AsyncHeaders",
    "AsyncRedirect",
    "AsyncResponse",
    "AsyncStatus",
    "Client",
    "Config",
    "ConfigurationError",
    "ConnError",
    "Decoded",
    "File",
    "Form",
    "HTTPillError",
    "Hooks",
    "HttpxAdapter",
    "Method",
    "Multipart",
    "Outcome",
    "Raw",
    "Request",
    "RequestOptions",
    "Response",
    "ResponseHandling",
    "Result",
    "StatusError",
    "Stream",
    "TransportOptions",
    "default_client",
    "delete",
    "delete_or_raise",
    "get",
    "get_or_raise",
    "head",
    "head_or_raise",
    "http_client",
    "load_config",
    "options",
    "options_or_raise",
    "patch",
    "patch_or_raise",
    "post",
    "post_or_raise",
    "put",
    "put_or_raise",
    "register_adapter",
    "request",
    "request_or_raise",
    "set_default_client",
    "stream_next",
    "unwrap",
]
