"""Remote key set configuration resolution for Cognito user pools."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from cognito_jwkset.config import (
    DEFAULT_REMOTE_CONFIG,
    JWKSetOptions,
    JWKSetSettings,
    RemoteFetchConfig,
)
from cognito_jwkset.exceptions import ConfigurationError
from cognito_jwkset.jwks import RemoteJWKSet
from cognito_jwkset.types import KeyResolver

JWKS_URL_TEMPLATE = (
    "https://cognito-idp.{region}.amazonaws.com/{user_pool_id}/.well-known/jwks.json"
)
MISSING_IDENTITY_MESSAGE = (
    "AWS_REGION and COGNITO_USER_POOL_ID must be provided via environment variables "
    "or options parameter"
)

RemoteFactory = Callable[[str, RemoteFetchConfig], KeyResolver]


def build_jwks_url(region: str, user_pool_id: str) -> str:
    """Build the well-known JWKS URL for a Cognito user pool."""
    return JWKS_URL_TEMPLATE.format(region=region, user_pool_id=user_pool_id)


@dataclass(frozen=True)
class CognitoIdentity:
    """Region and user pool identifying a Cognito JWKS endpoint."""

    region: str
    user_pool_id: str

    @property
    def jwks_url(self) -> str:
        """Return the JWKS URL for this user pool."""
        return build_jwks_url(self.region, self.user_pool_id)


def resolve_identity(
    options: JWKSetOptions | None, settings: JWKSetSettings
) -> CognitoIdentity:
    """Resolve region and user pool id from options, falling back to settings."""
    region = settings.aws_region
    user_pool_id = settings.cognito_user_pool_id
    if options is not None:
        if options.region is not None:
            region = options.region
        if options.user_pool_id is not None:
            user_pool_id = options.user_pool_id

    if not region or not user_pool_id:
        raise ConfigurationError(MISSING_IDENTITY_MESSAGE)
    return CognitoIdentity(region=region, user_pool_id=user_pool_id)


def merge_remote_config(options: JWKSetOptions | None) -> RemoteFetchConfig:
    """Overlay caller overrides on the production defaults, field by field."""
    merged = DEFAULT_REMOTE_CONFIG.model_dump()
    if options is not None:
        merged.update(options.remote_overrides())
    return RemoteFetchConfig(**merged)


def create_remote_jwkset(
    options: JWKSetOptions | None,
    settings: JWKSetSettings,
    factory: RemoteFactory = RemoteJWKSet,
) -> KeyResolver:
    """Validate identity and build the remote key set without fetching."""
    identity = resolve_identity(options, settings)
    return factory(identity.jwks_url, merge_remote_config(options))
