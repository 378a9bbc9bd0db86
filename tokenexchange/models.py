"""Request, response and result models for a token exchange."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .clock import Clock
from .constants import (
    GRANT_TYPE_AUTHORIZATION_CODE,
    GRANT_TYPE_REFRESH_TOKEN,
    PARAM_CLIENT_ID,
    PARAM_CODE,
    PARAM_CODE_VERIFIER,
    PARAM_GRANT_TYPE,
    PARAM_REDIRECT_URI,
    PARAM_REFRESH_TOKEN,
    PARAM_SCOPE,
)
from .errors import ExchangeError

_BUILT_IN_REQUEST_PARAMS = frozenset(
    {
        PARAM_GRANT_TYPE,
        PARAM_CODE,
        PARAM_REDIRECT_URI,
        PARAM_REFRESH_TOKEN,
        PARAM_CODE_VERIFIER,
        PARAM_SCOPE,
        PARAM_CLIENT_ID,
    }
)

_BUILT_IN_RESPONSE_PARAMS = frozenset(
    {"token_type", "access_token", "expires_in", "refresh_token", "id_token", "scope"}
)


class ProviderConfiguration(BaseModel):
    """Endpoints and identity of an authorization server."""

    model_config = ConfigDict(frozen=True)

    token_endpoint: str = Field(..., min_length=1)
    authorization_endpoint: Optional[str] = None
    issuer: Optional[str] = Field(
        default=None, description="Expected ID Token issuer"
    )


class TokenRequest(BaseModel):
    """An immutable request to a token endpoint.

    ``grant_type`` is inferred from the supplied grant when omitted: an
    authorization code implies ``authorization_code`` and a refresh token
    implies ``refresh_token``.
    """

    model_config = ConfigDict(frozen=True)

    configuration: ProviderConfiguration
    client_id: str = Field(..., min_length=1)
    grant_type: str
    authorization_code: Optional[str] = None
    redirect_uri: Optional[str] = None
    refresh_token: Optional[str] = None
    code_verifier: Optional[str] = None
    scope: Optional[str] = None
    nonce: Optional[str] = None
    additional_parameters: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _infer_grant_type(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("grant_type"):
            return data
        if data.get("authorization_code"):
            return {**data, "grant_type": GRANT_TYPE_AUTHORIZATION_CODE}
        if data.get("refresh_token"):
            return {**data, "grant_type": GRANT_TYPE_REFRESH_TOKEN}
        raise ValueError(
            "grant_type must be specified when neither an authorization code "
            "nor a refresh token is provided"
        )

    @field_validator("scope", mode="before")
    @classmethod
    def _join_scopes(cls, v: Union[str, List[str], None]) -> Optional[str]:
        if isinstance(v, (list, tuple, set)):
            return " ".join(s for s in v if s) or None
        return v

    @model_validator(mode="after")
    def _check_grant(self) -> "TokenRequest":
        if self.grant_type == GRANT_TYPE_AUTHORIZATION_CODE:
            if not self.authorization_code:
                raise ValueError("authorization code must be specified for grant_type authorization_code")
            if not self.redirect_uri:
                raise ValueError("redirect URI must be specified for grant_type authorization_code")
        elif self.grant_type == GRANT_TYPE_REFRESH_TOKEN and not self.refresh_token:
            raise ValueError("refresh token must be specified for grant_type refresh_token")

        clashes = sorted(_BUILT_IN_REQUEST_PARAMS.intersection(self.additional_parameters))
        if clashes:
            raise ValueError(
                f"additional parameters may not redefine built-in parameters: {', '.join(clashes)}"
            )
        return self

    def request_parameters(self) -> Dict[str, str]:
        """Return a fresh, ordered mapping of the form parameters to send."""
        params: Dict[str, str] = {PARAM_GRANT_TYPE: self.grant_type}
        optional = (
            (PARAM_REDIRECT_URI, self.redirect_uri),
            (PARAM_CODE, self.authorization_code),
            (PARAM_REFRESH_TOKEN, self.refresh_token),
            (PARAM_CODE_VERIFIER, self.code_verifier),
            (PARAM_SCOPE, self.scope),
        )
        for key, value in optional:
            if value is not None:
                params[key] = value
        params.update(self.additional_parameters)
        return params


class _TokenResponsePayload(BaseModel):
    """Shape check for a success-shaped token endpoint body."""

    model_config = ConfigDict(extra="ignore")

    token_type: str
    access_token: Optional[str] = None
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    scope: Optional[str] = None


class TokenResponse(BaseModel):
    """Tokens issued by a successful exchange."""

    model_config = ConfigDict(frozen=True)

    request: TokenRequest
    token_type: str
    access_token: Optional[str] = None
    access_token_expiration_time: Optional[datetime] = None
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    scope: Optional[str] = None
    additional_parameters: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response_json(
        cls, json: Dict[str, Any], request: TokenRequest, clock: Clock
    ) -> "TokenResponse":
        """Build a response from a decoded token endpoint body.

        Raises:
            pydantic.ValidationError: If the body does not have the shape of
                a token response.
        """
        payload = _TokenResponsePayload.model_validate(json)
        expiration = None
        if payload.expires_in is not None:
            expiration = clock.now() + timedelta(seconds=payload.expires_in)
        return cls(
            request=request,
            token_type=payload.token_type,
            access_token=payload.access_token,
            access_token_expiration_time=expiration,
            refresh_token=payload.refresh_token,
            id_token=payload.id_token,
            scope=payload.scope,
            additional_parameters={
                k: v for k, v in json.items() if k not in _BUILT_IN_RESPONSE_PARAMS
            },
        )

    @property
    def scope_set(self) -> frozenset[str]:
        return frozenset(self.scope.split()) if self.scope else frozenset()


class ExchangeResult(BaseModel):
    """Outcome of one exchange: exactly one of ``response`` or ``failure``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    response: Optional[TokenResponse] = None
    failure: Optional[ExchangeError] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "ExchangeResult":
        if (self.response is None) == (self.failure is None):
            raise ValueError("exactly one of response or failure must be set")
        return self

    @classmethod
    def success(cls, response: TokenResponse) -> "ExchangeResult":
        return cls(response=response)

    @classmethod
    def failed(cls, failure: ExchangeError) -> "ExchangeResult":
        return cls(failure=failure)

    @property
    def ok(self) -> bool:
        return self.response is not None

    def unwrap(self) -> TokenResponse:
        """Return the token response, raising the failure if there is one."""
        if self.failure is not None:
            raise self.failure
        return self.response
