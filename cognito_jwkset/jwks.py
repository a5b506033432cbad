"""Local and remote JWK set providers used as key resolvers."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Mapping
from typing import Any

import httpx
import structlog
from jose import jwk
from jose.backends.base import Key
from jose.exceptions import JOSEError

from cognito_jwkset.config import RemoteFetchConfig
from cognito_jwkset.exceptions import (
    JWKSInvalidError,
    JWKSMultipleMatchingKeysError,
    JWKSNoMatchingKeyError,
    JWKSResponseError,
    JWKSTimeoutError,
    JWKSUnavailableError,
)
from cognito_jwkset.types import JWK, JWKS, JWSHeader

logger = structlog.get_logger(__name__)

_CURVE_BY_ALGORITHM = {"ES256": "P-256", "ES384": "P-384", "ES512": "P-521"}


def _key_type_for_algorithm(algorithm: str) -> str | None:
    """Map a JWS algorithm to the JWK key type able to verify it."""
    if algorithm.startswith(("RS", "PS")):
        return "RSA"
    if algorithm.startswith("ES"):
        return "EC"
    if algorithm.startswith("HS"):
        return "oct"
    return None


def _validate_jwks(payload: Any) -> JWKS:
    """Ensure payload looks like a JWK set and return a normalized copy."""
    if not isinstance(payload, Mapping):
        raise JWKSInvalidError("JWKS payload must be a JSON object.")
    keys = payload.get("keys")
    if not isinstance(keys, list):
        raise JWKSInvalidError("JWKS payload must contain a 'keys' list.")

    normalized_keys: list[JWK] = []
    for item in keys:
        if not isinstance(item, Mapping):
            raise JWKSInvalidError("Invalid JWKS key entry.")
        kty = item.get("kty")
        if not isinstance(kty, str) or not kty:
            raise JWKSInvalidError("JWKS key entry is missing 'kty'.")
        normalized_keys.append(dict(item))  # type: ignore[arg-type]
    return {"keys": normalized_keys}


class LocalJWKSet:
    """Resolve verification keys from an in-memory JWK set."""

    def __init__(self, payload: Mapping[str, Any]) -> None:
        """Validate payload shape; key material is imported on first use."""
        self._jwks = _validate_jwks(payload)
        self._imported: dict[tuple[str | None, str], Key] = {}

    def jwks(self) -> JWKS:
        """Return a copy of the validated key set."""
        return {"keys": [dict(key) for key in self._jwks["keys"]]}  # type: ignore[misc]

    async def __call__(self, header: JWSHeader | Mapping[str, Any]) -> Key:
        """Return the key matching the protected header."""
        return self.get_key(header)

    def get_key(self, header: JWSHeader | Mapping[str, Any]) -> Key:
        """Select and import the single key matching the protected header."""
        algorithm = header.get("alg")
        if not isinstance(algorithm, str) or not algorithm:
            raise JWKSNoMatchingKeyError("Token header is missing 'alg'.")
        kid = header.get("kid")
        if kid is not None and not isinstance(kid, str):
            raise JWKSNoMatchingKeyError("Token header 'kid' must be a string.")

        candidates = [key for key in self._jwks["keys"] if self._matches(key, algorithm, kid)]
        if not candidates:
            raise JWKSNoMatchingKeyError("No applicable key found in the JSON Web Key Set.")
        if len(candidates) > 1:
            raise JWKSMultipleMatchingKeysError(
                "Multiple matching keys found in the JSON Web Key Set."
            )

        cache_key = (kid, algorithm)
        cached = self._imported.get(cache_key)
        if cached is not None:
            return cached
        try:
            imported = jwk.construct(dict(candidates[0]), algorithm=algorithm)
        except (JOSEError, ValueError, TypeError, AttributeError) as exc:
            raise JWKSInvalidError("Unable to import key from the JSON Web Key Set.") from exc
        self._imported[cache_key] = imported
        return imported

    @staticmethod
    def _matches(key: JWK, algorithm: str, kid: str | None) -> bool:
        """Return True when key is usable for the given algorithm and kid."""
        if kid is not None and key.get("kid") != kid:
            return False
        if key.get("kty") != _key_type_for_algorithm(algorithm):
            return False
        if "alg" in key and key["alg"] != algorithm:
            return False
        if "use" in key and key["use"] != "sig":
            return False
        key_ops = key.get("key_ops")
        if isinstance(key_ops, list) and "verify" not in key_ops:
            return False
        expected_curve = _CURVE_BY_ALGORITHM.get(algorithm)
        if expected_curve is not None and "crv" in key and key["crv"] != expected_curve:
            return False
        return True


class RemoteJWKSet:
    """Resolve verification keys from a remote JWKS endpoint with caching and cooldown."""

    def __init__(
        self,
        url: str,
        config: RemoteFetchConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        """Create provider; no network request is made until a key is requested.

        Without ``http_client`` each fetch opens and closes its own client, so the
        provider holds no connection between fetches and is not tied to one loop.
        """
        self._url = url
        self._config = config or RemoteFetchConfig()
        self._client = http_client
        self._now = now or time.monotonic
        self._local: LocalJWKSet | None = None
        self._fetched_at: float | None = None
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        """Return the JWKS endpoint URL."""
        return self._url

    @property
    def config(self) -> RemoteFetchConfig:
        """Return the fetch configuration."""
        return self._config

    @property
    def cooling_down(self) -> bool:
        """Return True while a refetch is suppressed after the last fetch."""
        if self._fetched_at is None:
            return False
        return self._now() < self._fetched_at + self._config.cooldown_seconds

    @property
    def fresh(self) -> bool:
        """Return True while the cached key set is within its max age."""
        if self._fetched_at is None:
            return False
        return self._now() <= self._fetched_at + self._config.cache_max_age_seconds

    def jwks(self) -> JWKS | None:
        """Return the cached key set, if any has been fetched."""
        return self._local.jwks() if self._local is not None else None

    async def __call__(self, header: JWSHeader | Mapping[str, Any]) -> Key:
        """Return the key matching header, refetching when stale or on unknown kid."""
        local = self._local
        if local is None or not self.fresh:
            local = await self.reload()

        try:
            return local.get_key(header)
        except JWKSNoMatchingKeyError:
            if self.cooling_down:
                raise
            local = await self.reload()
            return local.get_key(header)

    async def reload(self) -> LocalJWKSet:
        """Fetch the key set, coalescing concurrent reloads behind one lock."""
        generation = self._generation
        async with self._lock:
            # another caller completed a fetch while this one waited
            if self._local is not None and self._generation != generation:
                return self._local
            payload = await self._fetch()
            self._local = LocalJWKSet(payload)
            self._fetched_at = self._now()
            self._generation += 1
            logger.info("jwks_fetched", url=self._url, key_count=len(payload["keys"]))
            return self._local

    async def _get(self) -> httpx.Response:
        """Issue the GET on the injected client or a short-lived owned one."""
        headers = dict(self._config.headers)
        timeout = self._config.timeout_seconds
        if self._client is not None:
            return await self._client.get(self._url, headers=headers, timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.get(self._url, headers=headers)

    async def _fetch(self) -> JWKS:
        """GET the key set and normalize transport and payload failures."""
        try:
            response = await self._get()
        except httpx.TimeoutException as exc:
            logger.warning("jwks_fetch_failed", url=self._url, error="timeout")
            raise JWKSTimeoutError("JWKS request timed out.") from exc
        except httpx.RequestError as exc:
            logger.warning("jwks_fetch_failed", url=self._url, error=type(exc).__name__)
            raise JWKSUnavailableError("JWKS endpoint unavailable.") from exc

        if response.status_code != 200:
            logger.warning("jwks_fetch_failed", url=self._url, status_code=response.status_code)
            raise JWKSResponseError(
                f"JWKS request failed with status {response.status_code}.",
                response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise JWKSInvalidError("JWKS endpoint returned invalid JSON.") from exc
        return _validate_jwks(payload)
