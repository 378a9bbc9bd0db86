"""Tests for client authentication strategies."""

import base64

import pytest

from tokenexchange.auth import (
    NO_CLIENT_AUTHENTICATION,
    ClientAuthentication,
    ClientSecretBasic,
    ClientSecretPost,
    client_authentication_for,
)


def test_no_client_authentication_sends_client_id():
    assert NO_CLIENT_AUTHENTICATION.headers("app") is None
    assert NO_CLIENT_AUTHENTICATION.parameters("app") == {"client_id": "app"}


def test_client_secret_basic_form_encodes_credentials():
    auth = ClientSecretBasic(client_secret="s3cr:t/+")
    header = auth.headers("my app")["Authorization"]

    assert header.startswith("Basic ")
    decoded = base64.b64decode(header[len("Basic "):]).decode()
    assert decoded == "my+app:s3cr%3At%2F%2B"
    assert auth.parameters("my app") is None


def test_client_secret_post_sends_credentials_in_body():
    auth = ClientSecretPost(client_secret="secret")

    assert auth.headers("app") is None
    assert auth.parameters("app") == {"client_id": "app", "client_secret": "secret"}


def test_secret_not_in_repr():
    assert "secret-value" not in repr(ClientSecretPost(client_secret="secret-value"))


def test_custom_strategy_satisfies_protocol():
    class ApiKeyAuth:
        def headers(self, client_id):
            return {"X-Api-Key": "k"}

        def parameters(self, client_id):
            return None

    assert isinstance(ApiKeyAuth(), ClientAuthentication)


@pytest.mark.parametrize(
    "method, expected",
    [
        ("none", "NoClientAuthentication"),
        ("basic", "ClientSecretBasic"),
        ("client_secret_basic", "ClientSecretBasic"),
        ("post", "ClientSecretPost"),
        ("client_secret_post", "ClientSecretPost"),
    ],
)
def test_client_authentication_for(method, expected):
    auth = client_authentication_for(method, client_secret="secret")
    assert type(auth).__name__ == expected


def test_client_authentication_for_requires_secret():
    with pytest.raises(ValueError):
        client_authentication_for("basic")
    with pytest.raises(ValueError):
        client_authentication_for("private_key_jwt", client_secret="secret")
