"""Shared unit-test fixtures for key set resolution."""

from __future__ import annotations

import base64
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt

ENV_KEYS = ("AWS_REGION", "COGNITO_USER_POOL_ID", "COGNITO_LOCAL_JWKSET", "JWKSET_LOG_LEVEL")


def _base64url_uint(value: int) -> str:
    """Encode integer in URL-safe base64 without padding."""
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


@dataclass(frozen=True)
class SigningMaterial:
    """RSA private key PEM with its public JWK entry."""

    private_pem: str
    jwk: dict[str, str]

    def sign(self, subject: str = "user-1") -> str:
        """Build RS256 JWT carrying this key's kid."""
        now = datetime.now(UTC)
        payload = {
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=5)).timestamp()),
            "sub": subject,
            "token_use": "access",
        }
        return jwt.encode(
            payload, self.private_pem, algorithm="RS256", headers={"kid": self.jwk["kid"]}
        )


def generate_signing_material(kid: str) -> SigningMaterial:
    """Generate RSA private PEM and matching JWKS key entry."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_numbers = private_key.public_key().public_numbers()
    jwk = {
        "kty": "RSA",
        "alg": "RS256",
        "use": "sig",
        "kid": kid,
        "n": _base64url_uint(public_numbers.n),
        "e": _base64url_uint(public_numbers.e),
    }
    return SigningMaterial(private_pem=private_pem, jwk=jwk)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Isolate tests from ambient Cognito variables and any local .env file."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(scope="session")
def signing_material() -> SigningMaterial:
    """Build one RSA signing key shared by the session."""
    return generate_signing_material("kid-1")


@pytest.fixture(scope="session")
def rotated_signing_material() -> SigningMaterial:
    """Build a second RSA signing key standing in for a rotated key."""
    return generate_signing_material("kid-2")
