"""Client authentication strategies for the token endpoint.

A strategy contributes HTTP headers, body parameters, or both to a token
request.  Any object providing ``headers`` and ``parameters`` satisfies
:class:`ClientAuthentication`, so custom schemes need no base class.
"""

from __future__ import annotations

import base64
from typing import Dict, Optional, Protocol, runtime_checkable
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field

from ..constants import PARAM_CLIENT_ID, PARAM_CLIENT_SECRET


@runtime_checkable
class ClientAuthentication(Protocol):
    def headers(self, client_id: str) -> Optional[Dict[str, str]]:
        """Headers to add to the token request."""
        ...

    def parameters(self, client_id: str) -> Optional[Dict[str, str]]:
        """Body parameters to add to the token request."""
        ...


class NoClientAuthentication(BaseModel):
    """Public clients: identify with ``client_id`` only."""

    model_config = ConfigDict(frozen=True)

    def headers(self, client_id: str) -> Optional[Dict[str, str]]:
        return None

    def parameters(self, client_id: str) -> Optional[Dict[str, str]]:
        return {PARAM_CLIENT_ID: client_id}


class ClientSecretBasic(BaseModel):
    """``client_secret_basic``: HTTP Basic with form-encoded credentials.

    RFC 6749 section 2.3.1 requires both the id and the secret to be
    ``application/x-www-form-urlencoded`` before base64 encoding.
    """

    model_config = ConfigDict(frozen=True)

    client_secret: str = Field(..., repr=False)

    def headers(self, client_id: str) -> Optional[Dict[str, str]]:
        credentials = f"{quote_plus(client_id)}:{quote_plus(self.client_secret)}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {encoded}"}

    def parameters(self, client_id: str) -> Optional[Dict[str, str]]:
        return None


class ClientSecretPost(BaseModel):
    """``client_secret_post``: credentials sent in the request body."""

    model_config = ConfigDict(frozen=True)

    client_secret: str = Field(..., repr=False)

    def headers(self, client_id: str) -> Optional[Dict[str, str]]:
        return None

    def parameters(self, client_id: str) -> Optional[Dict[str, str]]:
        return {PARAM_CLIENT_ID: client_id, PARAM_CLIENT_SECRET: self.client_secret}


NO_CLIENT_AUTHENTICATION = NoClientAuthentication()


def client_authentication_for(
    method: str, client_secret: Optional[str] = None
) -> ClientAuthentication:
    """Return the strategy named by a ``token_endpoint_auth_method`` value."""
    method = method.lower()
    if method in ("none", ""):
        return NO_CLIENT_AUTHENTICATION
    if method in ("basic", "client_secret_basic", "post", "client_secret_post"):
        if not client_secret:
            raise ValueError(f"client secret is required for {method} authentication")
        if method.endswith("basic"):
            return ClientSecretBasic(client_secret=client_secret)
        return ClientSecretPost(client_secret=client_secret)
    raise ValueError(f"Unsupported client authentication method: {method}")
