"""Exception types for HTTPill."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .models import Response


class HTTPillError(Exception):
    """Base exception for all HTTPill errors."""

    pass


class ConnError(HTTPillError):
    """Raised (or returned) when the transport fails to complete an exchange.

    Attributes:
        reason: Opaque, transport-supplied failure reason
        id: Correlation id of the asynchronous exchange, if any
    """

    def __init__(self, reason: Any, id: Optional[Any] = None):
        self.reason = reason
        self.id = id
        if id is None:
            message = str(reason)
        else:
            message = f"[Reference: {id}] - {reason}"
        super().__init__(message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnError):
            return NotImplemented
        return self.reason == other.reason and self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self), repr(self.reason), self.id))

    def __repr__(self) -> str:
        return f"ConnError(reason={self.reason!r}, id={self.id!r})"


class StatusError(HTTPillError):
    """Raised for a completed response with a status code of 400 or above."""

    def __init__(self, response: Response):
        self.response = response
        request = response.request
        message = (
            f"The call to the {request.method} request on {request.url} returned "
            f"the status code {response.status_code}:\n\n    {response!r}\n"
        )
        super().__init__(message)


class ConfigurationError(HTTPillError):
    """Raised when client configuration is invalid."""

    pass
