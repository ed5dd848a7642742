"""Transport adapter contract.

An adapter performs the actual network exchange for a prepared
:class:`~httpill.models.Request`. HTTPill only shapes requests and
responses; connections, TLS, proxies and redirects are the adapter's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from ..errors import ConfigurationError
from ..headers import HeaderList
from ..models import Request, RequestOptions


@dataclass(frozen=True)
class TransportOptions:
    """Options handed to the adapter, derived one-to-one from ``RequestOptions``.

    Attributes:
        connect_timeout: Connect timeout in milliseconds (from ``timeout``)
        recv_timeout: Receive timeout in milliseconds
        proxy: Proxy URL or ``(host, port)`` tuple
        proxy_auth: ``(user, password)`` for the proxy
        ssl_options: TLS options (from ``ssl``)
        follow_redirect: Whether redirects are followed
        max_redirect: Maximum number of redirects
        stream_to: Inbox receiving ``(id, payload)`` notifications; set for
            asynchronous exchanges only
        once: Deliver one notification per ``stream_next`` call
        extra: Adapter specific options, passed through untouched
    """

    connect_timeout: Optional[float] = None
    recv_timeout: Optional[float] = None
    proxy: Any = None
    proxy_auth: Optional[tuple[str, str]] = None
    ssl_options: Optional[Mapping[str, Any]] = None
    follow_redirect: Optional[bool] = None
    max_redirect: Optional[int] = None
    stream_to: Any = None
    once: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_request_options(
        cls, options: RequestOptions, stream_to: Any = None
    ) -> TransportOptions:
        """Derive transport options; ``stream_to`` replaces the caller's destination."""
        return cls(
            connect_timeout=options.timeout,
            recv_timeout=options.recv_timeout,
            proxy=options.proxy,
            proxy_auth=options.proxy_auth,
            ssl_options=options.ssl,
            follow_redirect=options.follow_redirect,
            max_redirect=options.max_redirect,
            stream_to=stream_to,
            once=stream_to is not None and options.async_mode == "once",
            extra=dict(options.transport_options),
        )


@dataclass(frozen=True)
class InlineReply:
    """Reply of a synchronous exchange.

    ``body_handle`` is ``None`` when the response has no body (e.g. ``HEAD``);
    otherwise the body is read with :meth:`Adapter.read_body`.
    """

    status: int
    headers: HeaderList
    body_handle: Any = None


@dataclass(frozen=True)
class AsyncReply:
    """Reply of an asynchronous exchange; notifications follow on the inbox."""

    id: Any


Reply = Union[InlineReply, AsyncReply]


class Adapter(ABC):
    """Base class for transport adapters.

    Failures are reported by raising :class:`~httpill.errors.ConnError`.
    """

    name: str = "adapter"

    @abstractmethod
    async def issue(self, request: Request, options: TransportOptions) -> Reply:
        """Send ``request`` and return the reply."""
        pass

    @abstractmethod
    async def read_body(self, handle: Any) -> bytes:
        """Read the whole body behind ``handle``."""
        pass

    @abstractmethod
    async def stream_next(self, id: Any) -> None:
        """Allow one more notification of the ``once`` exchange ``id``."""
        pass

    async def aclose(self) -> None:
        """Release adapter resources."""
        pass


_registry: dict[str, Callable[[], Adapter]] = {}


def register_adapter(name: str, factory: Callable[[], Adapter]) -> None:
    """Register an adapter factory under ``name``."""
    _registry[name] = factory


def get_adapter(adapter: Union[str, Adapter]) -> Adapter:
    """Return an adapter instance for a registered name or an instance.

    Raises:
        ConfigurationError: If no adapter is registered under the name
    """
    if isinstance(adapter, Adapter):
        return adapter
    if adapter not in _registry:
        available = ", ".join(sorted(_registry)) or "none"
        raise ConfigurationError(f"Unknown adapter '{adapter}' (available: {available})")
    return _registry[adapter]()
