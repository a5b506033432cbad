"""JWK set resolution exception hierarchy."""

from __future__ import annotations


class JWKSetError(Exception):
    """Base class for all key set exceptions."""


class ConfigurationError(JWKSetError):
    """Raised when Cognito identity coordinates cannot be resolved."""


class LocalPayloadError(JWKSetError):
    """Raised when the local key set payload is malformed or rejected."""


class JWKSInvalidError(JWKSetError):
    """Raised when a key set or one of its keys fails validation."""


class JWKSNoMatchingKeyError(JWKSetError):
    """Raised when no key in the set matches the token header."""


class JWKSMultipleMatchingKeysError(JWKSetError):
    """Raised when the token header matches more than one key."""


class JWKSUnavailableError(JWKSetError):
    """Raised when the remote key set endpoint is unreachable."""


class JWKSTimeoutError(JWKSUnavailableError):
    """Raised when fetching the remote key set exceeds the configured timeout."""


class JWKSResponseError(JWKSetError):
    """Raised when the key set endpoint answers with an unexpected status."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        """Initialize with optional HTTP status code context."""
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
