"""Provider configuration and the API kinds a provider can serve."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from aigateway.retry import RetryConfig, default_retry_config


class APIType(enum.IntFlag):
    """API formats, combinable as a bit set."""

    CHAT_COMPLETIONS = 1
    RESPONSES = 2
    EMBEDDINGS = 4
    IMAGES = 8
    ALL = CHAT_COMPLETIONS | RESPONSES | EMBEDDINGS | IMAGES

    def supports(self, api_type: APIType) -> bool:
        """Return whether any bit of ``api_type`` is in this set."""
        return bool(int(self) & int(api_type))

    def __str__(self) -> str:
        return _API_TYPE_NAMES.get(int(self), f"unknown({int(self)})")

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


_API_TYPE_NAMES = {
    1: "chat_completions",
    2: "responses",
    4: "embeddings",
    8: "images",
    15: "all",
}


@dataclass
class ProviderConfig:
    """Settings for an upstream provider. Durations are in seconds."""

    name: str = ""
    base_url: str = ""
    base_path: str = ""
    api_key: str = ""
    supported_apis: APIType = APIType.CHAT_COMPLETIONS
    http_client: httpx.Client | None = None
    timeout: float = 60.0
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    max_idle_conns: int = 100
    max_conns_per_host: int = 10
    idle_conn_timeout: float = 90.0
    max_idle_conns_per_host: int = 10
    retry_config: RetryConfig | None = field(default_factory=default_retry_config)
    request_converter: Callable[[Any], None] | None = None
    response_converter: Callable[[Any], None] | None = None

    def create_client(self) -> httpx.Client:
        """Return the configured client, or build one from the pool and timeout settings."""
        if self.http_client is not None:
            return self.http_client

        total = self.timeout if self.timeout > 0 else None
        if self.connect_timeout > 0:
            timeout = httpx.Timeout(
                total,
                connect=self.connect_timeout,
                read=self.read_timeout if self.read_timeout > 0 else None,
            )
        else:
            timeout = httpx.Timeout(total)

        limits = httpx.Limits(
            max_connections=self.max_conns_per_host if self.max_conns_per_host > 0 else None,
            max_keepalive_connections=self.max_idle_conns if self.max_idle_conns > 0 else None,
            keepalive_expiry=self.idle_conn_timeout if self.idle_conn_timeout > 0 else None,
        )
        return httpx.Client(timeout=timeout, limits=limits)


def default_config() -> ProviderConfig:
    """Return a configuration with default settings and no name."""
    return ProviderConfig()


def new_provider_config(name: str) -> ProviderConfig:
    """Return a configuration with default settings and the given name."""
    return ProviderConfig(name=name)