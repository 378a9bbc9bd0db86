"""Connection seam between the exchange and the HTTP stack."""

from __future__ import annotations

import abc
from typing import Optional, Tuple

import requests
from requests.structures import CaseInsensitiveDict


class HttpConnection:
    """A single request/response round trip to one URL.

    Headers may be seeded by the connection builder before the exchange adds
    its own. The response is streamed; callers must close it.
    """

    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[Tuple[float, float]] = None,
        method: str = "POST",
    ) -> None:
        self.url = url
        self.method = method
        self.timeout = timeout
        self.request_headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
        self._owns_session = session is None
        self._session = session or requests.Session()

    def send(self, body: bytes) -> requests.Response:
        """Send ``body`` with the configured method and headers."""
        return self._session.request(
            self.method,
            self.url,
            data=body,
            headers=dict(self.request_headers),
            timeout=self.timeout,
            stream=True,
        )

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "HttpConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ConnectionBuilder(metaclass=abc.ABCMeta):
    """Opens connections; the place for TLS policy, proxies and timeouts."""

    @abc.abstractmethod
    def open_connection(self, url: str) -> HttpConnection:
        """Return a connection to ``url``.

        Raises:
            requests.RequestException: If the connection cannot be opened.
        """
        raise NotImplementedError
