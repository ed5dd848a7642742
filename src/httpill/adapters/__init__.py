"""Transport adapters."""

from .base import (
    Adapter,
    AsyncReply,
    InlineReply,
    Reply,
    TransportOptions,
    get_adapter,
    register_adapter,
)
from .httpx_adapter import HttpxAdapter

__all__ = [
    "Adapter",
    "AsyncReply",
    "HttpxAdapter",
    "InlineReply",
    "Reply",
    "TransportOptions",
    "get_adapter",
    "register_adapter",
]
