"""Module-level functions backed by a default client.

The default client is named ``default`` and is configured through the
``HTTPILL_DEFAULT_*`` environment variables. It is created on first use.
"""

from __future__ import annotations

from typing import Any, Optional

from .client import Client
from .events import AsyncResponse

_default_client: Optional[Client] = None


def default_client() -> Client:
    """Return the default client, creating it on first use."""
    global _default_client

    if _default_client is None:
        _default_client = Client(name="default")
    return _default_client


def set_default_client(client: Optional[Client]) -> None:
    """Replace the default client; ``None`` recreates it on next use."""
    global _default_client

    _default_client = client


async def request(method: str, url: str, **options: Any) -> Any:
    """Issue a request with the default client. See :meth:`Client.request`."""
    return await default_client().request(method, url, **options)


async def request_or_raise(method: str, url: str, **options: Any) -> Any:
    """Issue a request with the default client. See :meth:`Client.request_or_raise`."""
    return await default_client().request_or_raise(method, url, **options)


async def stream_next(response: AsyncResponse) -> Any:
    return await default_client().stream_next(response)


async def get(url: str, **options: Any) -> Any:
    return await default_client().get(url, **options)


async def head(url: str, **options: Any) -> Any:
    return await default_client().head(url, **options)


async def post(url: str, **options: Any) -> Any:
    return await default_client().post(url, **options)


async def put(url: str, **options: Any) -> Any:
    return await default_client().put(url, **options)


async def patch(url: str, **options: Any) -> Any:
    return await default_client().patch(url, **options)


async def delete(url: str, **options: Any) -> Any:
    return await default_client().delete(url, **options)


async def options(url: str, **options: Any) -> Any:
    return await default_client().options(url, **options)


async def get_or_raise(url: str, **options: Any) -> Any:
    return await default_client().get_or_raise(url, **options)


async def head_or_raise(url: str, **options: Any) -> Any:
    return await default_client().head_or_raise(url, **options)


async def post_or_raise(url: str, **options: Any) -> Any:
    return await default_client().post_or_raise(url, **options)


async def put_or_raise(url: str, **options: Any) -> Any:
    return await default_client().put_or_raise(url, **options)


async def patch_or_raise(url: str, **options: Any) -> Any:
    return await default_client().patch_or_raise(url, **options)


async def delete_or_raise(url: str, **options: Any) -> Any:
    return await default_client().delete_or_raise(url, **options)


async def options_or_raise(url: str, **options: Any) -> Any:
    return await default_client().options_or_raise(url, **options)
