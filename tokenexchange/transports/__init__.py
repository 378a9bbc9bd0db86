"""Connection builders for reaching the token endpoint."""

from __future__ import annotations

from typing import Optional

from ..config import ExchangeConfig, load_config
from .base import ConnectionBuilder, HttpConnection
from .http import DefaultConnectionBuilder


def get_connection_builder(config: Optional[ExchangeConfig] = None) -> ConnectionBuilder:
    """Factory function returning the configured connection builder."""

    config = config or load_config()
    http = config.http
    return DefaultConnectionBuilder(
        connect_timeout=http.connect_timeout,
        read_timeout=http.read_timeout,
        allow_insecure_connections=http.allow_insecure_connections,
    )


__all__ = [
    "ConnectionBuilder",
    "DefaultConnectionBuilder",
    "HttpConnection",
    "get_connection_builder",
]
