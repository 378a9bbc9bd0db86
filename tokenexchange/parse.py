"""Interpretation of token endpoint payloads."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from .auth.id_token import IdToken, IdTokenError, IdTokenValidator
from .clock import SYSTEM_CLOCK, Clock
from .constants import PARAM_ERROR, PARAM_ERROR_DESCRIPTION, PARAM_ERROR_URI
from .errors import (
    ExchangeError,
    deserialization_error,
    id_token_parsing_error,
    oauth_error,
    parse_uri_if_available,
)
from .models import ExchangeResult, TokenRequest, TokenResponse

logger = logging.getLogger(__name__)

Payload = Union[Dict[str, Any], ExchangeError]


class TokenResponseParser:
    """Turns a decoded token endpoint body into an :class:`ExchangeResult`.

    The first applicable outcome wins: an upstream failure, an OAuth error
    response, a malformed success body, a malformed ID Token, a rejected ID
    Token, and finally the validated token response.
    """

    def __init__(
        self,
        clock: Clock = SYSTEM_CLOCK,
        validator: Optional[IdTokenValidator] = None,
    ) -> None:
        self.clock = clock
        self.validator = validator or IdTokenValidator(clock=clock)

    def parse(self, payload: Payload, request: TokenRequest) -> ExchangeResult:
        if isinstance(payload, ExchangeError):
            return ExchangeResult.failed(payload)

        if PARAM_ERROR in payload:
            return ExchangeResult.failed(self._error_response(payload, request))

        try:
            response = TokenResponse.from_response_json(payload, request, self.clock)
        except ValidationError as exc:
            logger.debug("Token response has an invalid shape", exc_info=True)
            return ExchangeResult.failed(deserialization_error(exc))

        if response.id_token is not None:
            try:
                id_token = IdToken.from_jwt(response.id_token)
            except IdTokenError as exc:
                logger.debug("Unable to parse ID Token", exc_info=True)
                return ExchangeResult.failed(id_token_parsing_error(exc))

            failure = self.validator.validate(id_token, request)
            if failure is not None:
                return ExchangeResult.failed(failure)

        logger.debug(
            f"Token exchange with {request.configuration.token_endpoint} completed"
        )
        return ExchangeResult.success(response)

    def _error_response(self, payload: Dict[str, Any], request: TokenRequest) -> ExchangeError:
        error = payload[PARAM_ERROR]
        if not isinstance(error, str):
            logger.debug(f"Token error response has a non-string error: {error!r}")
            return deserialization_error(
                TypeError(f"'{PARAM_ERROR}' must be a string, got {type(error).__name__}")
            )

        description = payload.get(PARAM_ERROR_DESCRIPTION)
        if not isinstance(description, str):
            description = None
        failure = oauth_error(
            error,
            description=description,
            error_uri=parse_uri_if_available(payload.get(PARAM_ERROR_URI)),
        )
        logger.warning(
            f"Token endpoint {request.configuration.token_endpoint} returned error "
            f"{error}: {description or 'no description'}"
        )
        return failure
