"""Classified failures produced by a token exchange.

Every failure of an exchange is captured where it happens and carried to the
caller as an :class:`ExchangeError` value inside the exchange result.  The
error is an ``Exception`` subclass so callers that prefer exceptions can raise
it (see :meth:`tokenexchange.models.ExchangeResult.unwrap`), but the exchange
itself never raises it.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

_URL_ADAPTER = TypeAdapter(AnyUrl)


class ErrorCategory(str, Enum):
    """Mutually exclusive failure classes."""

    NETWORK = "network"
    DESERIALIZATION = "deserialization"
    OAUTH_TOKEN = "oauth_token"
    ID_TOKEN_PARSING = "id_token_parsing"
    ID_TOKEN_VALIDATION = "id_token_validation"


class ErrorCode(str, Enum):
    """Stable codes for every failure an exchange can produce."""

    NETWORK_ERROR = "network_error"
    JSON_DESERIALIZATION_ERROR = "json_deserialization_error"

    # RFC 6749 section 5.2
    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    INVALID_SCOPE = "invalid_scope"
    OAUTH_TOKEN_ERROR = "oauth_token_error"

    ID_TOKEN_PARSING_ERROR = "id_token_parsing_error"

    ID_TOKEN_ISSUER_INVALID = "id_token_issuer_invalid"
    ID_TOKEN_AUDIENCE_INVALID = "id_token_audience_invalid"
    ID_TOKEN_EXPIRED = "id_token_expired"
    ID_TOKEN_ISSUED_AT_INVALID = "id_token_issued_at_invalid"
    ID_TOKEN_NONCE_INVALID = "id_token_nonce_invalid"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_OAUTH_TOKEN_CODES = (
    ErrorCode.INVALID_REQUEST,
    ErrorCode.INVALID_CLIENT,
    ErrorCode.INVALID_GRANT,
    ErrorCode.UNAUTHORIZED_CLIENT,
    ErrorCode.UNSUPPORTED_GRANT_TYPE,
    ErrorCode.INVALID_SCOPE,
    ErrorCode.OAUTH_TOKEN_ERROR,
)

_CATEGORIES: Dict[ErrorCode, ErrorCategory] = {
    ErrorCode.NETWORK_ERROR: ErrorCategory.NETWORK,
    ErrorCode.JSON_DESERIALIZATION_ERROR: ErrorCategory.DESERIALIZATION,
    ErrorCode.ID_TOKEN_PARSING_ERROR: ErrorCategory.ID_TOKEN_PARSING,
    ErrorCode.ID_TOKEN_ISSUER_INVALID: ErrorCategory.ID_TOKEN_VALIDATION,
    ErrorCode.ID_TOKEN_AUDIENCE_INVALID: ErrorCategory.ID_TOKEN_VALIDATION,
    ErrorCode.ID_TOKEN_EXPIRED: ErrorCategory.ID_TOKEN_VALIDATION,
    ErrorCode.ID_TOKEN_ISSUED_AT_INVALID: ErrorCategory.ID_TOKEN_VALIDATION,
    ErrorCode.ID_TOKEN_NONCE_INVALID: ErrorCategory.ID_TOKEN_VALIDATION,
    **{code: ErrorCategory.OAUTH_TOKEN for code in _OAUTH_TOKEN_CODES},
}

_DEFAULT_DESCRIPTIONS: Dict[ErrorCode, str] = {
    ErrorCode.NETWORK_ERROR: "Network error",
    ErrorCode.JSON_DESERIALIZATION_ERROR: "JSON deserialization error",
    ErrorCode.ID_TOKEN_PARSING_ERROR: "Unable to parse ID Token",
    ErrorCode.ID_TOKEN_ISSUER_INVALID: "ID Token issuer is not valid",
    ErrorCode.ID_TOKEN_AUDIENCE_INVALID: "ID Token audience does not contain the client id",
    ErrorCode.ID_TOKEN_EXPIRED: "ID Token has expired",
    ErrorCode.ID_TOKEN_ISSUED_AT_INVALID: "ID Token issued at time is in the future",
    ErrorCode.ID_TOKEN_NONCE_INVALID: "ID Token nonce does not match the request",
}

_RETRYABLE = frozenset({ErrorCategory.NETWORK, ErrorCategory.DESERIALIZATION})


class ExchangeError(Exception):
    """A classified token exchange failure.

    Attributes:
        code: Stable :class:`ErrorCode` for the failure.
        error: The OAuth ``error`` string exactly as the server sent it, or the
            code's own value for failures that did not come from the server.
        description: Human readable description.
        error_uri: Documentation URI supplied by the server, if any.
        cause: Lower level exception that triggered the failure, if any.
    """

    def __init__(
        self,
        code: ErrorCode,
        error: Optional[str] = None,
        description: Optional[str] = None,
        error_uri: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.code = code
        self.error = error if error is not None else code.value
        self.description = description or _DEFAULT_DESCRIPTIONS.get(code)
        self.error_uri = error_uri
        self.cause = cause
        self.__cause__ = cause
        super().__init__(self.description or self.error)

    @property
    def category(self) -> ErrorCategory:
        return self.code.category

    @property
    def retryable(self) -> bool:
        """``True`` for failure classes a caller may reasonably retry."""
        return self.category in _RETRYABLE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the failure. The wrapped cause is not included."""
        data: Dict[str, Any] = {
            "code": self.code.value,
            "category": self.category.value,
            "error": self.error,
        }
        if self.description is not None:
            data["error_description"] = self.description
        if self.error_uri is not None:
            data["error_uri"] = self.error_uri
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExchangeError":
        return cls(
            ErrorCode(data["code"]),
            error=data.get("error"),
            description=data.get("error_description"),
            error_uri=data.get("error_uri"),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExchangeError):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.code, self.error))

    def __repr__(self) -> str:
        return f"ExchangeError(code={self.code.value!r}, error={self.error!r})"


def classify(error: str) -> ErrorCode:
    """Map an OAuth token endpoint ``error`` string to an :class:`ErrorCode`.

    Unknown strings map to :attr:`ErrorCode.OAUTH_TOKEN_ERROR`; the original
    string is kept on the resulting :class:`ExchangeError`.
    """
    for code in _OAUTH_TOKEN_CODES:
        if code.value == error:
            return code
    return ErrorCode.OAUTH_TOKEN_ERROR


def parse_uri_if_available(value: Any) -> Optional[str]:
    """Return ``value`` if it is a syntactically valid absolute URI."""
    if not isinstance(value, str) or not value:
        return None
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        logger.debug(f"Ignoring malformed error_uri: {value!r}")
        return None
    return value


def oauth_error(
    error: str, description: Optional[str] = None, error_uri: Optional[str] = None
) -> ExchangeError:
    """Build the failure for an OAuth error response."""
    return ExchangeError(
        classify(error), error=error, description=description, error_uri=error_uri
    )


def network_error(cause: BaseException) -> ExchangeError:
    return ExchangeError(ErrorCode.NETWORK_ERROR, cause=cause)


def deserialization_error(cause: Optional[BaseException] = None) -> ExchangeError:
    return ExchangeError(ErrorCode.JSON_DESERIALIZATION_ERROR, cause=cause)


def id_token_parsing_error(cause: BaseException) -> ExchangeError:
    return ExchangeError(ErrorCode.ID_TOKEN_PARSING_ERROR, cause=cause)


__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "ExchangeError",
    "classify",
    "deserialization_error",
    "id_token_parsing_error",
    "network_error",
    "oauth_error",
    "parse_uri_if_available",
]
