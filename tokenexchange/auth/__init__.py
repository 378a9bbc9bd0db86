"""Client authentication and ID Token handling."""

from .client_auth import (
    NO_CLIENT_AUTHENTICATION,
    ClientAuthentication,
    ClientSecretBasic,
    ClientSecretPost,
    NoClientAuthentication,
    client_authentication_for,
)
from .id_token import IdToken, IdTokenError, IdTokenValidator

__all__ = [
    "ClientAuthentication",
    "ClientSecretBasic",
    "ClientSecretPost",
    "IdToken",
    "IdTokenError",
    "IdTokenValidator",
    "NO_CLIENT_AUTHENTICATION",
    "NoClientAuthentication",
    "client_authentication_for",
]
