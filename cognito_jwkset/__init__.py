"""Public cognito-jwkset exports."""

from cognito_jwkset.config import (
    JWKSetOptions,
    JWKSetSettings,
    LoggingSettings,
    RemoteFetchConfig,
    configure_structlog,
)
from cognito_jwkset.exceptions import (
    ConfigurationError,
    JWKSetError,
    JWKSInvalidError,
    JWKSMultipleMatchingKeysError,
    JWKSNoMatchingKeyError,
    JWKSResponseError,
    JWKSTimeoutError,
    JWKSUnavailableError,
)
from cognito_jwkset.jwks import LocalJWKSet, RemoteJWKSet
from cognito_jwkset.resolver import build_jwks_url
from cognito_jwkset.selector import resolve
from cognito_jwkset.types import KeyResolver

__all__ = [
    "ConfigurationError",
    "JWKSInvalidError",
    "JWKSMultipleMatchingKeysError",
    "JWKSNoMatchingKeyError",
    "JWKSResponseError",
    "JWKSTimeoutError",
    "JWKSUnavailableError",
    "JWKSetError",
    "JWKSetOptions",
    "JWKSetSettings",
    "KeyResolver",
    "LoggingSettings",
    "LocalJWKSet",
    "RemoteFetchConfig",
    "RemoteJWKSet",
    "build_jwks_url",
    "configure_structlog",
    "resolve",
]
