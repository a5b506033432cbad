"""Offline key set loading from a raw JSON payload."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from cognito_jwkset.exceptions import LocalPayloadError
from cognito_jwkset.jwks import LocalJWKSet
from cognito_jwkset.types import KeyResolver

LocalFactory = Callable[[Mapping[str, Any]], KeyResolver]


@dataclass(frozen=True)
class LocalSourceLoaded:
    """Local payload parsed and accepted by the key set provider."""

    resolver: KeyResolver


@dataclass(frozen=True)
class LocalSourceUnusable:
    """Local payload could not be used; the remote source should be tried."""

    reason: Literal["invalid_json", "invalid_jwks"]
    error: LocalPayloadError


LocalSourceResult = LocalSourceLoaded | LocalSourceUnusable


def _reject_constant(name: str) -> Any:
    """Refuse NaN and Infinity, which are not part of JSON."""
    raise ValueError(f"Invalid JSON constant: {name}")


def load_local_jwkset(raw: str, factory: LocalFactory = LocalJWKSet) -> LocalSourceResult:
    """Parse raw JSON into a local key set, reporting failure as a value."""
    try:
        payload = json.loads(raw, parse_constant=_reject_constant)
    except Exception as exc:
        error = LocalPayloadError("Local JWKS is not valid JSON.")
        error.__cause__ = exc
        return LocalSourceUnusable(reason="invalid_json", error=error)

    try:
        resolver = factory(payload)
    except Exception as exc:
        error = LocalPayloadError(f"Local JWKS was rejected: {exc}")
        error.__cause__ = exc
        return LocalSourceUnusable(reason="invalid_jwks", error=error)
    return LocalSourceLoaded(resolver=resolver)
