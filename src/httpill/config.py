"""Client configuration.

A client's configuration is assembled from two layers, later layers winning:

1. Options given in code (``Client(config=...)`` keyword arguments, the
   ``http_client`` decorator or class attributes)
2. Environment variables named ``HTTPILL_<CLIENT>_<FIELD>``, e.g.
   ``HTTPILL_GITHUB_BASE_URL`` or ``HTTPILL_DEFAULT_RESPONSE_HANDLING_METHOD``

Example:
    Loading a configuration for a client named ``github``::

        config = load_config("github", base_url="https://api.github.com")
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from . import headers as header_list
from .errors import ConfigurationError
from .handling import ResponseHandling
from .headers import HeaderList

ENV_PREFIX = "HTTPILL_"


class Config(BaseModel):
    """Configuration of an HTTPill client.

    Attributes:
        adapter: Transport adapter, by registered name or as an instance
            (default: "httpx")
        base_url: Prefix for every request URL (default: None)
        request_headers: Headers added to every request (default: [])
        response_handling_method: One of "conn_error", "status_error" or
            "no_tuple" (default: "conn_error")
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    adapter: Any = "httpx"
    base_url: Optional[str] = None
    request_headers: HeaderList = []
    response_handling_method: ResponseHandling = ResponseHandling.CONN_ERROR

    @field_validator("request_headers", mode="before")
    @classmethod
    def _normalize_headers(cls, value: Any) -> HeaderList:
        return [tuple(pair) for pair in header_list.normalize(value)]


class EnvironmentSource:
    """Configuration source that reads ``Config`` fields from environment variables."""

    def __init__(self, prefix: str = ENV_PREFIX):
        """Initialize environment source.

        Args:
            prefix: Prefix for environment variables (e.g., "HTTPILL_GITHUB_")
        """
        self.name = f"ENV:{prefix}"
        self.prefix = prefix.upper()

    def load(self) -> Dict[str, Any]:
        """Load configuration from environment variables.

        Returns:
            Dictionary containing the fields found in the environment
        """
        config = {}

        for field_name in Config.model_fields:
            value = os.environ.get(f"{self.prefix}{field_name.upper()}")
            if value is None:
                continue
            config[field_name] = self._convert_value(field_name, value)

        return config

    def _convert_value(self, field_name: str, value: str) -> Any:
        """Convert string value to the shape expected by ``field_name``.

        Headers are given as comma-separated ``Name=Value`` pairs.
        """
        if field_name != "request_headers":
            return value.strip()

        headers = []
        for item in value.split(","):
            if not item.strip():
                continue
            name, sep, header_value = item.partition("=")
            if not sep:
                raise ConfigurationError(
                    f"Invalid header {item!r} in {self.prefix}REQUEST_HEADERS, expected Name=Value"
                )
            headers.append((name.strip(), header_value.strip()))
        return headers

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


def env_prefix(name: str) -> str:
    """Return the environment variable prefix for the client ``name``."""
    return f"{ENV_PREFIX}{re.sub(r'[^0-9A-Za-z]+', '_', name).upper()}_"


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two flat configuration dictionaries, ``override`` winning."""
    return {**base, **override}


def load_config(name: str = "default", **options: Any) -> Config:
    """Build the configuration of client ``name``.

    Args:
        name: Client name, used to select environment variables
        **options: Configuration given in code

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If an option is unknown or invalid
    """
    unknown = set(options) - set(Config.model_fields)
    if unknown:
        raise ConfigurationError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")

    data = merge_configs(options, EnvironmentSource(env_prefix(name)).load())
    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration for client '{name}': {e}") from e
