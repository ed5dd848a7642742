"""JSON encoding and decoding for request and response bodies."""

from __future__ import annotations

import json
from typing import Any


def encode(value: Any) -> str:
    """Encode ``value`` as compact JSON text.

    Raises:
        ValueError: If the value cannot be represented as JSON, including
            NaN and infinite floats
    """
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Cannot encode {type(value).__name__} as JSON: {e}") from e


def decode(text: str | bytes) -> Any:
    """Decode JSON text.

    Raises:
        ValueError: If the text is not valid JSON
    """
    try:
        return json.loads(text)
    except (TypeError, UnicodeDecodeError) as e:
        raise ValueError(f"Cannot decode JSON: {e}") from e
