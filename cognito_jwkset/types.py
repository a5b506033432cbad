"""Key set data contract types."""

from __future__ import annotations

from typing import Any, Protocol, TypedDict

from jose.backends.base import Key


class JWK(TypedDict, total=False):
    """Single JSON Web Key entry."""

    kty: str
    use: str
    kid: str
    alg: str
    key_ops: list[str]
    crv: str
    n: str
    e: str
    x: str
    y: str
    k: str


class JWKS(TypedDict):
    """JSON Web Key Set payload."""

    keys: list[JWK]


class JWSHeader(TypedDict, total=False):
    """Protected header fields used for key selection."""

    alg: str
    kid: str
    typ: str


class KeyResolver(Protocol):
    """Callable mapping a token header to its verification key."""

    async def __call__(self, header: JWSHeader | dict[str, Any]) -> Key: ...
