"""Token exchange execution: one request, one response, one result."""

from __future__ import annotations

import json
import logging
from typing import Optional
from urllib.parse import urlencode

import requests

from .auth.client_auth import NO_CLIENT_AUTHENTICATION, ClientAuthentication
from .auth.id_token import IdTokenValidator
from .clock import SYSTEM_CLOCK, Clock
from .config import ExchangeConfig, load_config
from .constants import CONTENT_TYPE_FORM, CONTENT_TYPE_JSON
from .errors import deserialization_error, network_error
from .models import ExchangeResult, TokenRequest
from .parse import Payload, TokenResponseParser
from .transports import ConnectionBuilder, HttpConnection, get_connection_builder

logger = logging.getLogger(__name__)


class TokenExchangeExecutor:
    """Performs token requests against a token endpoint.

    The executor holds no per-exchange state, so one instance may serve
    concurrent calls from several threads. Every failure is returned inside
    the :class:`ExchangeResult`; :meth:`execute` does not raise.
    """

    def __init__(
        self,
        connection_builder: Optional[ConnectionBuilder] = None,
        clock: Clock = SYSTEM_CLOCK,
        config: Optional[ExchangeConfig] = None,
    ) -> None:
        config = config or load_config()
        self._connection_builder = connection_builder or get_connection_builder(config)
        self._parser = TokenResponseParser(
            clock=clock,
            validator=IdTokenValidator(
                clock=clock,
                clock_skew_seconds=config.id_token.clock_skew_seconds,
                allow_insecure_issuer=config.id_token.allow_insecure_issuer,
            ),
        )

    def execute(
        self,
        request: TokenRequest,
        client_auth: ClientAuthentication = NO_CLIENT_AUTHENTICATION,
    ) -> ExchangeResult:
        """Exchange the grant in ``request`` for tokens."""
        payload = self._perform_request(request, client_auth)
        return self._parser.parse(payload, request)

    def _perform_request(
        self, request: TokenRequest, client_auth: ClientAuthentication
    ) -> Payload:
        token_endpoint = request.configuration.token_endpoint
        logger.debug(f"Performing token request to {token_endpoint}")
        try:
            with self._connection_builder.open_connection(token_endpoint) as conn:
                body = self._prepare(conn, request, client_auth)
                text = self._read_response(conn, body)
        except (requests.RequestException, OSError) as exc:
            logger.debug(
                f"Failed to complete exchange request to {token_endpoint}", exc_info=True
            )
            return network_error(exc)
        except Exception as exc:
            # Connection builders and client authentication are caller supplied;
            # their failures are reported in the result like any other.
            logger.warning(
                f"Exchange request to {token_endpoint} failed before a response was read: {exc}",
                exc_info=True,
            )
            return network_error(exc)

        try:
            payload = json.loads(text)
        except ValueError as exc:
            logger.debug(
                f"Failed to complete exchange request to {token_endpoint}", exc_info=True
            )
            return deserialization_error(exc)
        if not isinstance(payload, dict):
            logger.debug(f"Token endpoint {token_endpoint} returned a non-object body")
            return deserialization_error(
                TypeError(f"Expected a JSON object, got {type(payload).__name__}")
            )
        return payload

    def _prepare(
        self,
        conn: HttpConnection,
        request: TokenRequest,
        client_auth: ClientAuthentication,
    ) -> bytes:
        """Set headers on ``conn`` and return the encoded form body."""
        conn.method = "POST"
        conn.request_headers["Content-Type"] = CONTENT_TYPE_FORM
        # Some issuers (GitHub) only send RFC 6749 error bodies when
        # JSON is explicitly accepted.
        if not conn.request_headers.get("Accept"):
            conn.request_headers["Accept"] = CONTENT_TYPE_JSON

        conn.request_headers.update(client_auth.headers(request.client_id) or {})

        parameters = request.request_parameters()
        parameters.update(client_auth.parameters(request.client_id) or {})

        body = urlencode(parameters).encode("utf-8")
        conn.request_headers["Content-Length"] = str(len(body))
        return body

    def _read_response(self, conn: HttpConnection, body: bytes) -> str:
        response = conn.send(body)
        try:
            # OAuth error bodies arrive on 4xx responses and are parsed the
            # same way as success bodies.
            if not 200 <= response.status_code < 300:
                logger.debug(
                    f"Token endpoint {conn.url} responded with HTTP {response.status_code}"
                )
            return response.text
        finally:
            response.close()


def perform_token_request(
    request: TokenRequest,
    client_auth: ClientAuthentication = NO_CLIENT_AUTHENTICATION,
    connection_builder: Optional[ConnectionBuilder] = None,
    clock: Clock = SYSTEM_CLOCK,
    config: Optional[ExchangeConfig] = None,
) -> ExchangeResult:
    """Run a single token exchange with a throwaway executor."""
    executor = TokenExchangeExecutor(
        connection_builder=connection_builder, clock=clock, config=config
    )
    return executor.execute(request, client_auth)
