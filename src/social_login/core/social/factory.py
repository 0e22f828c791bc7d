"""Authenticator factory.

Builds the request-bound Authenticator with provider endpoints taken from
the built-in definitions plus any configured in settings.
"""

from typing import Dict, Mapping

from redis.asyncio import Redis

from social_login.config.settings import Settings
from social_login.core.social.oauth import PROVIDER_ENDPOINTS, OAuth2Authenticator, OAuthEndpoints
from social_login.core.social.provider import Authenticator


def get_provider_endpoints(settings: Settings) -> Dict[str, OAuthEndpoints]:
    """Built-in endpoint definitions merged with Settings.social_login_endpoints

    Raises:
        ValueError: If a configured endpoint definition is incomplete
    """
    endpoints = dict(PROVIDER_ENDPOINTS)
    for provider, definition in settings.social_login_endpoints.items():
        try:
            endpoints[provider.lower()] = OAuthEndpoints(**definition)
        except TypeError as e:
            raise ValueError(f"Invalid OAuth endpoint definition for {provider}: {e}") from e
    return endpoints


def create_authenticator(
    settings: Settings,
    redis_client: Redis,
    session_id: str,
    params: Mapping[str, str],
) -> Authenticator:
    """Create the Authenticator for the current request.

    Args:
        settings: Application settings
        redis_client: Redis connection for handshake state
        session_id: Current session identifier
        params: Query parameters of the current request

    Returns:
        Configured Authenticator instance
    """
    return OAuth2Authenticator(
        redis_client=redis_client,
        session_id=session_id,
        params=params,
        endpoints=get_provider_endpoints(settings),
        timeout=settings.http_timeout_seconds,
        state_ttl_seconds=settings.handshake_ttl_seconds,
    )
