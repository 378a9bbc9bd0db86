"""Shared fixtures: a fixed clock, a fake HTTP session and ID Token minting."""

from datetime import datetime, timezone

import jwt
import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from tokenexchange import ProviderConfiguration, TokenRequest
from tokenexchange.config import ExchangeConfig
from tokenexchange.transports import ConnectionBuilder, HttpConnection

ISSUER = "https://idp.example.com"
TOKEN_ENDPOINT = "https://idp.example.com/oauth/token"
CLIENT_ID = "client-123"
NONCE = "n-0S6_WzA2Mj"


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now


class FakeResponse:
    def __init__(self, status_code, body, read_error=None):
        self.status_code = status_code
        self._body = body
        self._read_error = read_error
        self.closed = False

    @property
    def text(self):
        if self._read_error is not None:
            raise self._read_error
        return self._body

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for ``requests.Session`` and records what was sent."""

    def __init__(self):
        self.calls = []
        self.responses = []
        self.error = None

    def respond(self, status_code, body, read_error=None):
        response = FakeResponse(status_code, body, read_error=read_error)
        self.responses.append(response)
        return response

    def request(self, method, url, data=None, headers=None, timeout=None, stream=False):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "data": data,
                "headers": headers,
                "timeout": timeout,
                "stream": stream,
            }
        )
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    def close(self):
        pass

    @property
    def last_call(self):
        return self.calls[-1]


class FakeConnectionBuilder(ConnectionBuilder):
    def __init__(self, session):
        self.session = session
        self.preset_headers = {}
        self.open_error = None
        self.opened = []

    def open_connection(self, url):
        if self.open_error is not None:
            raise self.open_error
        conn = HttpConnection(url, session=self.session, timeout=(1.0, 1.0))
        conn.request_headers.update(self.preset_headers)
        self.opened.append(conn)
        return conn


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def now_ts(clock):
    return int(clock.now().timestamp())


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def connection_builder(fake_session):
    return FakeConnectionBuilder(fake_session)


@pytest.fixture
def config():
    return ExchangeConfig()


@pytest.fixture
def provider():
    return ProviderConfiguration(token_endpoint=TOKEN_ENDPOINT, issuer=ISSUER)


@pytest.fixture
def code_request(provider):
    return TokenRequest(
        configuration=provider,
        client_id=CLIENT_ID,
        authorization_code="auth-code",
        redirect_uri="https://app.example.com/callback",
        code_verifier="verifier",
        nonce=NONCE,
    )


@pytest.fixture
def refresh_request(provider):
    return TokenRequest(
        configuration=provider,
        client_id=CLIENT_ID,
        refresh_token="refresh-1",
    )


@pytest.fixture(scope="session")
def signing_key():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )


@pytest.fixture
def make_id_token(signing_key, now_ts):
    """Mint an RS256 ID Token; claim overrides set to ``None`` are removed."""

    def _make(**overrides):
        claims = {
            "iss": ISSUER,
            "sub": "alice",
            "aud": CLIENT_ID,
            "iat": now_ts,
            "exp": now_ts + 3600,
            "nonce": NONCE,
        }
        for name, value in overrides.items():
            if value is None:
                claims.pop(name, None)
            else:
                claims[name] = value
        return jwt.encode(claims, signing_key, algorithm="RS256", headers={"kid": "test"})

    return _make


@pytest.fixture
def timeout_error():
    return requests.exceptions.ConnectTimeout("timed out")
