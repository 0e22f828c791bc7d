"""OAuth 2.0 authorization-code authenticator.

Default Authenticator for the built-in social providers:
- Facebook
- Google
- Windows Live

Each invocation handles one leg of the handshake for the current request:
1. No code in the request: store a CSRF state and raise AuthorizationRedirect
   to the provider's consent page.
2. Provider callback with an error (user declined): not connected.
3. Provider callback with a code: verify the state, exchange the code for an
   access token and fetch the user profile.
"""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

import httpx
from redis.asyncio import Redis

from social_login.core.social.errors import (
    AuthorizationRedirect,
    HandshakeError,
    ProviderConfigurationError,
)
from social_login.core.social.provider import Authenticator, HandshakeResult, RawProfile
from social_login.domain.models import ProviderConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthEndpoints:
    """Provider OAuth 2.0 endpoints and profile field mapping.

    Attributes:
        authorize_url: Consent page the browser is sent to
        token_url: Code-for-token exchange endpoint
        userinfo_url: Profile endpoint called with the access token
        scope: Scopes requested at authorization
        profile_fields: RawProfile attribute -> dotted path in the userinfo payload
    """
    authorize_url: str
    token_url: str
    userinfo_url: str
    scope: str
    profile_fields: Dict[str, str] = field(default_factory=dict)


PROVIDER_ENDPOINTS: Dict[str, OAuthEndpoints] = {
    "facebook": OAuthEndpoints(
        authorize_url="https://www.facebook.com/v19.0/dialog/oauth",
        token_url="https://graph.facebook.com/v19.0/oauth/access_token",
        userinfo_url="https://graph.facebook.com/v19.0/me?fields=id,first_name,last_name,name,email",
        scope="email,public_profile",
        profile_fields={
            "identifier": "id",
            "first_name": "first_name",
            "last_name": "last_name",
            "email": "email",
            "display_name": "name",
        },
    ),
    "google": OAuthEndpoints(
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        userinfo_url="https://openidconnect.googleapis.com/v1/userinfo",
        scope="openid email profile",
        profile_fields={
            "identifier": "sub",
            "first_name": "given_name",
            "last_name": "family_name",
            "email": "email",
            "display_name": "name",
        },
    ),
    "windowslive": OAuthEndpoints(
        authorize_url="https://login.live.com/oauth20_authorize.srf",
        token_url="https://login.live.com/oauth20_token.srf",
        userinfo_url="https://apis.live.net/v5.0/me",
        scope="wl.basic wl.emails",
        profile_fields={
            "identifier": "id",
            "first_name": "first_name",
            "last_name": "last_name",
            "email": "emails.preferred",
            "display_name": "name",
        },
    ),
}


class OAuth2Authenticator(Authenticator):
    """Authorization-code OAuth 2.0 handshake bound to one request.

    Handshake state is kept in Redis per session and provider:
    - social_login:handshake:{session_id}:{provider} -> {state} (expires after state_ttl_seconds)
    """

    def __init__(
        self,
        redis_client: Redis,
        session_id: str,
        params: Mapping[str, str] = None,
        endpoints: Dict[str, OAuthEndpoints] = None,
        timeout: float = 10.0,
        state_ttl_seconds: int = 600,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize authenticator for the current request.

        Args:
            redis_client: Redis connection for handshake state
            session_id: Session the handshake belongs to
            params: Query parameters of the current request
            endpoints: Provider endpoint definitions (default: PROVIDER_ENDPOINTS)
            timeout: HTTP timeout for provider calls in seconds
            state_ttl_seconds: Lifetime of a pending handshake
            transport: Optional httpx transport for provider calls
        """
        self.redis = redis_client
        self.session_id = session_id
        self.params = dict(params or {})
        self.endpoints = endpoints if endpoints is not None else PROVIDER_ENDPOINTS
        self.timeout = timeout
        self.state_ttl_seconds = state_ttl_seconds
        self.transport = transport
        self.state_key_pattern = "social_login:handshake:{}:{}"

    async def authenticate(
        self,
        provider: str,
        config: ProviderConfig,
        callback_url: str
    ) -> HandshakeResult:
        endpoints = self._check_config(provider, config)

        if self.params.get("error"):
            await self.redis.delete(self._state_key(provider))
            logger.warning(
                f"{provider} handshake declined: {self.params.get('error')} "
                f"{self.params.get('error_description', '')}".rstrip()
            )
            return HandshakeResult.not_connected()

        code = self.params.get("code")
        if not code:
            url = await self._authorization_url(provider, endpoints, config, callback_url)
            raise AuthorizationRedirect(url, provider=provider)

        await self._consume_state(provider, self.params.get("state"))

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                access_token = await self._exchange_code(client, provider, endpoints, config, code, callback_url)
                userinfo = await self._fetch_userinfo(client, provider, endpoints, access_token)
            except httpx.HTTPError as e:
                logger.error(f"{provider} handshake transport error: {e}")
                raise HandshakeError(f"{provider} request failed: {e}", provider=provider) from e

        profile = map_profile(userinfo, endpoints.profile_fields)
        logger.info(f"{provider} handshake connected (identifier={profile.identifier})")
        return HandshakeResult.connected(profile)

    def _check_config(self, provider: str, config: ProviderConfig) -> OAuthEndpoints:
        if not config.enabled:
            raise ProviderConfigurationError(f"Provider {provider} is disabled", provider=provider)
        if not config.has_credentials:
            raise ProviderConfigurationError(
                f"Provider {provider} requires api_key and api_secret", provider=provider
            )
        endpoints = self.endpoints.get(provider)
        if endpoints is None:
            raise ProviderConfigurationError(
                f"No OAuth endpoints defined for provider {provider}", provider=provider
            )
        return endpoints

    async def _authorization_url(
        self, provider: str, endpoints: OAuthEndpoints, config: ProviderConfig, callback_url: str
    ) -> str:
        state = secrets.token_urlsafe(24)
        await self.redis.set(self._state_key(provider), state, ex=self.state_ttl_seconds)

        params = {
            "client_id": config.key,
            "response_type": "code",
            "redirect_uri": callback_url,
            "scope": endpoints.scope,
            "state": state,
        }
        logger.info(f"Redirecting to {provider} for authorization")
        return f"{endpoints.authorize_url}?{urlencode(params)}"

    async def _consume_state(self, provider: str, state: Optional[str]) -> None:
        # single use: a replayed callback finds nothing
        expected = await self.redis.getdel(self._state_key(provider))

        if isinstance(expected, bytes):
            expected = expected.decode()
        if not expected or not state or not secrets.compare_digest(expected, state):
            logger.warning(f"{provider} callback state mismatch for session {self.session_id[:8]}...")
            raise HandshakeError("Invalid or expired handshake state", provider=provider)

    async def _exchange_code(
        self,
        client: httpx.AsyncClient,
        provider: str,
        endpoints: OAuthEndpoints,
        config: ProviderConfig,
        code: str,
        callback_url: str,
    ) -> str:
        response = await client.post(
            endpoints.token_url,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": callback_url,
                "client_id": config.key,
                "client_secret": config.secret,
            },
            headers={"Accept": "application/json"},
        )
        if response.status_code != 200:
            logger.error(f"{provider} token exchange failed: {response.status_code} {response.text}")
            raise HandshakeError(f"Token exchange failed: {response.status_code}", provider=provider)

        access_token = response.json().get("access_token")
        if not access_token:
            raise HandshakeError("Token response has no access_token", provider=provider)
        return access_token

    async def _fetch_userinfo(
        self, client: httpx.AsyncClient, provider: str, endpoints: OAuthEndpoints, access_token: str
    ) -> Dict[str, Any]:
        response = await client.get(
            endpoints.userinfo_url,
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
        )
        if response.status_code != 200:
            logger.error(f"{provider} profile request failed: {response.status_code} {response.text}")
            raise HandshakeError(f"Profile request failed: {response.status_code}", provider=provider)
        return response.json()

    def _state_key(self, provider: str) -> str:
        return self.state_key_pattern.format(self.session_id, provider)


def map_profile(payload: Dict[str, Any], profile_fields: Dict[str, str]) -> RawProfile:
    """Build a RawProfile from a provider payload using dotted field paths"""
    values = {}
    for attribute, path in profile_fields.items():
        value = _lookup(payload, path)
        values[attribute] = None if value is None else str(value)
    return RawProfile(raw=payload, **values)


def _lookup(payload: Dict[str, Any], path: str) -> Any:
    value: Any = payload
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value
