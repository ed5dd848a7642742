"""Request preparation pipeline.

A request goes through a fixed sequence of pure stages before it is handed
to the transport:

1. :func:`attach_params` appends ``params`` as a query string
2. :func:`resolve_url` prepends the configured ``base_url`` and a default
   ``http://`` scheme
3. :func:`resolve_headers` normalizes headers, merges configured headers and
   adds a JSON ``Content-Type`` for structured bodies
4. :func:`encode_body` JSON-encodes structured bodies

:func:`prepare` runs all four. Request hooks are applied around it by the
client.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import urlencode

from . import codec, headers as header_list
from .headers import HeaderList, HeaderTypes
from .models import Request

if TYPE_CHECKING:
    from .config import Config

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"

_KNOWN_SCHEMES = ("http://", "https://", "http+unix://")


def prepare(request: Request, config: Config) -> Request:
    """Run every preparation stage on ``request``."""
    url = resolve_url(attach_params(request.url, request.params), config.base_url)
    headers = resolve_headers(request.headers, request.body, config.request_headers)
    body = encode_body(request.body, headers)
    return replace(request, url=url, headers=headers, body=body)


def attach_params(url: str, params: Any) -> str:
    """Append ``params`` to ``url`` as a query string.

    Uses ``&`` when the URL already has a query component, ``?`` otherwise.
    Repeated keys are kept as multiple values. Empty params (``{}`` or
    ``[]``) leave the URL unchanged, like ``None``.
    """
    if not params:
        return url
    if isinstance(params, Mapping):
        params = list(params.items())
    query = urlencode(params, doseq=True)
    separator = "&" if "?" in url.split("#", 1)[0] else "?"
    return f"{url}{separator}{query}"


def resolve_url(url: str, base_url: Optional[str] = None) -> str:
    """Prefix ``url`` with ``base_url`` and a default ``http://`` scheme.

    An empty ``base_url`` is treated like ``None``. Malformed URLs are not
    rejected here; they fail in the transport.
    """
    if base_url:
        url = f"{base_url}/{url}"
    if url[:12].lower().startswith(_KNOWN_SCHEMES):
        return url
    return f"http://{url}"


def resolve_headers(headers: HeaderTypes, body: Any, extra: HeaderTypes = None) -> HeaderList:
    """Normalize headers and add a JSON content type for structured bodies."""
    resolved = header_list.normalize(headers) + header_list.normalize(extra)
    if isinstance(body, Mapping):
        resolved = header_list.put(resolved, "Content-Type", JSON_CONTENT_TYPE)
    return resolved


def encode_body(body: Any, headers: HeaderTypes) -> Any:
    """JSON-encode a structured body when the content type asks for JSON.

    Encoding failures leave the body untouched.
    """
    content_type = header_list.get(headers, "Content-Type")
    if content_type is None or not isinstance(body, Mapping):
        return body
    if "json" not in content_type:
        return body
    try:
        return codec.encode(body)
    except ValueError:
        return body
