from __future__ import annotations

import os
from typing import Optional

import yaml
from pydantic import BaseModel

from .constants import (
    DEFAULT_CLOCK_SKEW_SECONDS,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
)


class HttpConfig(BaseModel):
    """Settings for connections to the token endpoint."""

    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    allow_insecure_connections: bool = False


class IdTokenConfig(BaseModel):
    """ID Token validation settings."""

    clock_skew_seconds: int = DEFAULT_CLOCK_SKEW_SECONDS
    allow_insecure_issuer: bool = False


class ExchangeConfig(BaseModel):
    """Top-level configuration model."""

    http: HttpConfig = HttpConfig()
    id_token: IdTokenConfig = IdTokenConfig()


def load_config(path: Optional[str] = None) -> ExchangeConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to TOKENEXCHANGE_CONFIG
            env variable or 'tokenexchange.yaml' in the current directory.
    """

    config_path = path or os.getenv("TOKENEXCHANGE_CONFIG", "tokenexchange.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = ExchangeConfig(**data)
    else:
        config = ExchangeConfig()

    env_skew = os.getenv("TOKENEXCHANGE_CLOCK_SKEW")
    if env_skew:
        config.id_token.clock_skew_seconds = int(env_skew)
    return config
