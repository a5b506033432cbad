"""Local-first key resolver selection with remote Cognito fallback."""

from __future__ import annotations

import structlog

from cognito_jwkset.config import JWKSetOptions, JWKSetSettings
from cognito_jwkset.jwks import LocalJWKSet, RemoteJWKSet
from cognito_jwkset.local import LocalFactory, LocalSourceLoaded, load_local_jwkset
from cognito_jwkset.resolver import RemoteFactory, create_remote_jwkset
from cognito_jwkset.types import KeyResolver

logger = structlog.get_logger(__name__)


def resolve(
    options: JWKSetOptions | None = None,
    *,
    settings: JWKSetSettings | None = None,
    local_factory: LocalFactory = LocalJWKSet,
    remote_factory: RemoteFactory = RemoteJWKSet,
) -> KeyResolver:
    """Return a key resolver for Cognito-issued JWTs.

    A local key set from ``COGNITO_LOCAL_JWKSET`` is preferred when it parses
    and is accepted. Otherwise the remote Cognito JWKS endpoint is used with
    production defaults merged with ``options``.

    Settings are read from the environment on every call unless provided.
    Raises ``ConfigurationError`` only when the remote path is taken and the
    region or user pool id cannot be resolved.
    """
    if settings is None:
        settings = JWKSetSettings()

    raw_local = settings.cognito_local_jwkset
    if raw_local:
        result = load_local_jwkset(raw_local, factory=local_factory)
        if isinstance(result, LocalSourceLoaded):
            logger.info("jwkset_source_selected", source="local")
            return result.resolver
        logger.warning(
            "jwkset_local_source_unusable", reason=result.reason, error=str(result.error)
        )

    resolver = create_remote_jwkset(options, settings, factory=remote_factory)
    logger.info("jwkset_source_selected", source="remote")
    return resolver
