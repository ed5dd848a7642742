"""Response body decoding and response-handling policies."""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Any, NamedTuple, Optional, Union

from . import codec, headers as header_list
from .models import Decoded, Raw, Request, Response


class Outcome(str, Enum):
    """Tag of a :class:`Result`."""

    OK = "ok"
    STATUS_ERROR = "status_error"
    ERROR = "error"


class Result(NamedTuple):
    """Tagged result returned under the ``conn_error`` and ``status_error`` policies.

    Compares equal to plain tuples, so ``result == ("ok", response)`` holds.
    """

    outcome: Outcome
    value: Any

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


class ResponseHandling(str, Enum):
    """How success and failure are represented to callers.

    - ``CONN_ERROR``: ``("ok", value)`` for every completed exchange and
      ``("error", ConnError)`` for transport failures
    - ``STATUS_ERROR``: like ``CONN_ERROR`` but ``("status_error", response)``
      for status codes of 400 and above
    - ``NO_TUPLE``: bare values, including a bare ``ConnError``
    """

    CONN_ERROR = "conn_error"
    STATUS_ERROR = "status_error"
    NO_TUPLE = "no_tuple"


def accepts_of(request: Optional[Request]) -> Optional[str]:
    """Return the request's ``Accepts`` header, if any."""
    if request is None:
        return None
    return header_list.get(request.headers, "Accepts")


def decode_body(response: Response, accepts: Optional[str]) -> Response:
    """Decode the body as JSON when ``accepts`` mentions ``json``.

    The body is kept as is when there is no ``accepts`` value or decoding
    fails.
    """
    if accepts is None or "json" not in accepts:
        return response
    body = response.body
    data = body.data if isinstance(body, Raw) else body
    try:
        value = codec.decode(data)
    except ValueError:
        return response
    return replace(response, body=Decoded(value))


def wrap(value: Any, policy: Union[ResponseHandling, str]) -> Any:
    """Wrap a response or async handle according to ``policy``."""
    policy = ResponseHandling(policy)
    if policy is ResponseHandling.NO_TUPLE:
        return value
    if (
        policy is ResponseHandling.STATUS_ERROR
        and isinstance(value, Response)
        and value.status_code >= 400
    ):
        return Result(Outcome.STATUS_ERROR, value)
    return Result(Outcome.OK, value)


def wrap_error(error: Any, policy: Union[ResponseHandling, str]) -> Any:
    """Wrap a connection error according to ``policy``."""
    if ResponseHandling(policy) is ResponseHandling.NO_TUPLE:
        return error
    return Result(Outcome.ERROR, error)
