"""OpenID Connect ID Token parsing and claim validation."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

import jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..clock import SYSTEM_CLOCK, Clock
from ..constants import DEFAULT_CLOCK_SKEW_SECONDS
from ..errors import ErrorCode, ExchangeError
from ..models import TokenRequest

logger = logging.getLogger(__name__)

_STANDARD_CLAIMS = frozenset({"iss", "sub", "aud", "exp", "iat", "nonce", "azp"})


class IdTokenError(ValueError):
    """Raised when an ID Token string is not a structurally valid JWT."""


class IdToken(BaseModel):
    """Claims of an ID Token. Built only from a well formed three part JWT.

    The signature is not verified; tokens received directly from the token
    endpoint over TLS are trusted on transport (OIDC Core section 3.1.3.7).
    """

    model_config = ConfigDict(frozen=True)

    issuer: str = Field(alias="iss")
    subject: str = Field(alias="sub")
    audience: List[str] = Field(alias="aud")
    expiration: int = Field(alias="exp")
    issued_at: int = Field(alias="iat")
    nonce: Optional[str] = None
    authorized_party: Optional[str] = Field(default=None, alias="azp")
    additional_claims: Dict[str, Any] = Field(default_factory=dict)
    header: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("expiration", "issued_at", mode="before")
    @classmethod
    def _truncate_numeric_date(cls, v: Any) -> Any:
        # NumericDate may carry fractional seconds
        if isinstance(v, float):
            return int(v)
        return v

    @field_validator("audience", mode="before")
    @classmethod
    def _audience_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    @classmethod
    def from_jwt(cls, token: str) -> "IdToken":
        """Decode ``token`` without verifying its signature.

        Raises:
            IdTokenError: If the token does not have three segments, a segment
                is not valid base64url JSON, or a required claim is missing or
                has the wrong type.
        """
        if token.count(".") != 2:
            raise IdTokenError("ID Token must have header, claims and signature segments")
        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as exc:
            raise IdTokenError(f"Malformed ID Token: {exc}") from exc

        additional = {k: v for k, v in claims.items() if k not in _STANDARD_CLAIMS}
        try:
            return cls.model_validate(
                {**claims, "additional_claims": additional, "header": header}
            )
        except ValidationError as exc:
            raise IdTokenError(f"Invalid ID Token claims: {exc}") from exc


def _is_secure_issuer(issuer: str) -> bool:
    parsed = urlparse(issuer)
    return (
        parsed.scheme == "https"
        and bool(parsed.netloc)
        and not parsed.query
        and not parsed.fragment
    )


class IdTokenValidator:
    """Checks ID Token claims against the request that produced them.

    Args:
        clock: Time source; the wall clock is never read directly.
        clock_skew_seconds: Tolerance applied to the expiry and issued-at
            checks.
        allow_insecure_issuer: Accept non-``https`` issuers, for local
            identity providers in tests.
    """

    def __init__(
        self,
        clock: Clock = SYSTEM_CLOCK,
        clock_skew_seconds: int = DEFAULT_CLOCK_SKEW_SECONDS,
        allow_insecure_issuer: bool = False,
    ) -> None:
        self.clock = clock
        self.clock_skew_seconds = clock_skew_seconds
        self.allow_insecure_issuer = allow_insecure_issuer

    def validate(self, id_token: IdToken, request: TokenRequest) -> Optional[ExchangeError]:
        """Return the first failed check as an :class:`ExchangeError`, or ``None``."""
        now = self.clock.now().timestamp()
        checks: List[Callable[[IdToken, TokenRequest, float], Optional[ExchangeError]]] = [
            self._check_issuer,
            self._check_audience,
            self._check_expiration,
            self._check_issued_at,
            self._check_nonce,
        ]
        for check in checks:
            failure = check(id_token, request, now)
            if failure is not None:
                logger.warning(
                    f"ID Token from {id_token.issuer} rejected: {failure.code.value}"
                )
                return failure
        return None

    def _check_issuer(
        self, id_token: IdToken, request: TokenRequest, now: float
    ) -> Optional[ExchangeError]:
        if not self.allow_insecure_issuer and not _is_secure_issuer(id_token.issuer):
            return ExchangeError(
                ErrorCode.ID_TOKEN_ISSUER_INVALID,
                description="Issuer must be an https URL without query or fragment",
            )
        expected = request.configuration.issuer
        if expected is not None and id_token.issuer != expected:
            return ExchangeError(
                ErrorCode.ID_TOKEN_ISSUER_INVALID,
                description="Issuer does not match the provider configuration",
            )
        return None

    def _check_audience(
        self, id_token: IdToken, request: TokenRequest, now: float
    ) -> Optional[ExchangeError]:
        if request.client_id not in id_token.audience:
            return ExchangeError(ErrorCode.ID_TOKEN_AUDIENCE_INVALID)
        return None

    def _check_expiration(
        self, id_token: IdToken, request: TokenRequest, now: float
    ) -> Optional[ExchangeError]:
        if now >= id_token.expiration + self.clock_skew_seconds:
            return ExchangeError(ErrorCode.ID_TOKEN_EXPIRED)
        return None

    def _check_issued_at(
        self, id_token: IdToken, request: TokenRequest, now: float
    ) -> Optional[ExchangeError]:
        if id_token.issued_at > now + self.clock_skew_seconds:
            return ExchangeError(ErrorCode.ID_TOKEN_ISSUED_AT_INVALID)
        return None

    def _check_nonce(
        self, id_token: IdToken, request: TokenRequest, now: float
    ) -> Optional[ExchangeError]:
        if request.nonce is not None and id_token.nonce != request.nonce:
            return ExchangeError(ErrorCode.ID_TOKEN_NONCE_INVALID)
        return None
