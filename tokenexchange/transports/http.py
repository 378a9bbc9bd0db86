"""Default ``requests`` based connection builder."""

from __future__ import annotations

from typing import Dict, Optional
from urllib.parse import urlparse

import requests

from ..constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT
from .base import ConnectionBuilder, HttpConnection


class DefaultConnectionBuilder(ConnectionBuilder):
    """Opens HTTPS connections with connect and read timeouts.

    Args:
        session: Shared session to send requests on. When omitted every
            connection gets a private session that is closed with it.
        connect_timeout: Seconds to wait for the TCP/TLS handshake.
        read_timeout: Seconds to wait between bytes of the response.
        default_headers: Headers seeded on every connection.
        allow_insecure_connections: Permit plain ``http`` endpoints.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        default_headers: Optional[Dict[str, str]] = None,
        allow_insecure_connections: bool = False,
    ) -> None:
        self.session = session
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.default_headers = dict(default_headers or {})
        self.allow_insecure_connections = allow_insecure_connections

    def open_connection(self, url: str) -> HttpConnection:
        try:
            scheme = urlparse(url).scheme
        except ValueError as exc:
            raise requests.exceptions.InvalidURL(f"Malformed token endpoint: {url}") from exc
        allowed = ("https", "http") if self.allow_insecure_connections else ("https",)
        if scheme not in allowed:
            raise requests.exceptions.InvalidSchema(
                f"Only {' or '.join(allowed)} connections are permitted: {url}"
            )
        connection = HttpConnection(
            url,
            session=self.session,
            timeout=(self.connect_timeout, self.read_timeout),
        )
        connection.request_headers.update(self.default_headers)
        return connection
