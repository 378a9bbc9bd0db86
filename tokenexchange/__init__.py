"""tokenexchange: OAuth 2.0 / OpenID Connect token endpoint exchanges."""

from .auth import (
    NO_CLIENT_AUTHENTICATION,
    ClientAuthentication,
    ClientSecretBasic,
    ClientSecretPost,
    IdToken,
    IdTokenValidator,
    NoClientAuthentication,
)
from .clock import Clock, SystemClock
from .config import ExchangeConfig, load_config
from .errors import ErrorCategory, ErrorCode, ExchangeError, classify
from .execute import TokenExchangeExecutor, perform_token_request
from .models import ExchangeResult, ProviderConfiguration, TokenRequest, TokenResponse
from .parse import TokenResponseParser
from .transports import ConnectionBuilder, DefaultConnectionBuilder, HttpConnection

__version__ = "0.1.0"
__all__ = [
    "ClientAuthentication",
    "ClientSecretBasic",
    "ClientSecretPost",
    "Clock",
    "ConnectionBuilder",
    "DefaultConnectionBuilder",
    "ErrorCategory",
    "ErrorCode",
    "ExchangeConfig",
    "ExchangeError",
    "ExchangeResult",
    "HttpConnection",
    "IdToken",
    "IdTokenValidator",
    "NO_CLIENT_AUTHENTICATION",
    "NoClientAuthentication",
    "ProviderConfiguration",
    "SystemClock",
    "TokenExchangeExecutor",
    "TokenRequest",
    "TokenResponse",
    "TokenResponseParser",
    "classify",
    "load_config",
    "perform_token_request",
]
