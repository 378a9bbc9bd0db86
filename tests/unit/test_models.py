"""Tests for request, response and result models."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from tokenexchange import (
    ErrorCode,
    ExchangeError,
    ExchangeResult,
    ProviderConfiguration,
    TokenRequest,
    TokenResponse,
)

PROVIDER = ProviderConfiguration(token_endpoint="https://idp.example.com/token")


def test_grant_type_inferred_from_code():
    request = TokenRequest(
        configuration=PROVIDER,
        client_id="app",
        authorization_code="abc",
        redirect_uri="https://app/cb",
    )
    assert request.grant_type == "authorization_code"


def test_grant_type_inferred_from_refresh_token():
    request = TokenRequest(configuration=PROVIDER, client_id="app", refresh_token="r")
    assert request.grant_type == "refresh_token"


def test_grant_type_required_without_grant():
    with pytest.raises(ValidationError):
        TokenRequest(configuration=PROVIDER, client_id="app")


def test_authorization_code_requires_redirect_uri():
    with pytest.raises(ValidationError):
        TokenRequest(configuration=PROVIDER, client_id="app", authorization_code="abc")


def test_refresh_grant_requires_refresh_token():
    with pytest.raises(ValidationError):
        TokenRequest(configuration=PROVIDER, client_id="app", grant_type="refresh_token")


def test_additional_parameters_cannot_redefine_built_ins():
    with pytest.raises(ValidationError):
        TokenRequest(
            configuration=PROVIDER,
            client_id="app",
            refresh_token="r",
            additional_parameters={"grant_type": "password"},
        )


def test_request_parameters_order_and_contents():
    request = TokenRequest(
        configuration=PROVIDER,
        client_id="app",
        authorization_code="abc",
        redirect_uri="https://app/cb",
        code_verifier="v",
        scope=["openid", "email"],
        additional_parameters={"resource": "https://api"},
    )
    params = request.request_parameters()

    assert list(params) == [
        "grant_type",
        "redirect_uri",
        "code",
        "code_verifier",
        "scope",
        "resource",
    ]
    assert params["scope"] == "openid email"

    params["client_id"] = "mutated"
    assert "client_id" not in request.request_parameters()


def test_request_is_immutable():
    request = TokenRequest(configuration=PROVIDER, client_id="app", refresh_token="r")
    with pytest.raises(ValidationError):
        request.client_id = "other"


def test_token_response_from_json(clock):
    request = TokenRequest(configuration=PROVIDER, client_id="app", refresh_token="r")
    response = TokenResponse.from_response_json(
        {
            "access_token": "abc",
            "token_type": "Bearer",
            "expires_in": "60",
            "scope": "openid email",
            "custom": {"nested": [1, 2]},
            "another": True,
        },
        request,
        clock,
    )

    assert response.access_token_expiration_time == clock.now() + timedelta(seconds=60)
    assert response.scope_set == {"openid", "email"}
    assert list(response.additional_parameters) == ["custom", "another"]
    assert response.request is request


@pytest.mark.parametrize(
    "body",
    [
        {"access_token": "abc"},
        {"access_token": "abc", "token_type": 7},
        {"token_type": "Bearer", "expires_in": "soon"},
        {"token_type": "Bearer", "id_token": ["x"]},
    ],
)
def test_token_response_rejects_malformed_json(body, clock):
    request = TokenRequest(configuration=PROVIDER, client_id="app", refresh_token="r")
    with pytest.raises(ValidationError):
        TokenResponse.from_response_json(body, request, clock)


def test_exchange_result_holds_exactly_one_value(clock):
    request = TokenRequest(configuration=PROVIDER, client_id="app", refresh_token="r")
    response = TokenResponse(request=request, token_type="Bearer")
    failure = ExchangeError(ErrorCode.NETWORK_ERROR)

    assert ExchangeResult.success(response).ok
    assert not ExchangeResult.failed(failure).ok
    with pytest.raises(ValidationError):
        ExchangeResult()
    with pytest.raises(ValidationError):
        ExchangeResult(response=response, failure=failure)


def test_unwrap_raises_failure():
    failure = ExchangeError(ErrorCode.INVALID_GRANT)
    with pytest.raises(ExchangeError) as excinfo:
        ExchangeResult.failed(failure).unwrap()
    assert excinfo.value is failure


def test_unwrap_returns_response():
    request = TokenRequest(configuration=PROVIDER, client_id="app", refresh_token="r")
    response = TokenResponse(request=request, token_type="Bearer")

    assert ExchangeResult.success(response).unwrap() is response
