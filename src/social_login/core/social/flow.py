"""Social login flow orchestration.

Runs one step of a social login for the current request: provider
configuration and callback URL go to the Authenticator, and a connected
handshake is turned into a logged-in local account.

The same flow runs twice per login. The first request usually ends in an
AuthorizationRedirect raised by the Authenticator; the provider callback
request then completes the handshake and the login.
"""

import logging
from typing import Iterable, Optional

from social_login.core.social.config_resolver import ProviderConfigResolver
from social_login.core.social.endpoint import CallbackEndpointBuilder
from social_login.core.social.errors import UnsupportedProviderError
from social_login.core.social.normalizer import ProfileNormalizer
from social_login.core.social.provider import (
    DEFAULT_PROVIDERS,
    Authenticator,
    HandshakeResult,
    HandshakeStatus,
)
from social_login.core.social.reconciler import AccountReconciler
from social_login.core.social.redirect_cookie import RedirectCookieManager
from social_login.core.social.session import SessionEstablisher
from social_login.domain.models import (
    CookieScope,
    CustomerSession,
    LoginResult,
    LoginStatus,
    StoreContext,
)

logger = logging.getLogger(__name__)


class SocialLoginFlow:
    """Request-scoped social login.

    Every collaborator is passed in; nothing is looked up globally.
    """

    def __init__(
        self,
        *,
        store: StoreContext,
        session: CustomerSession,
        config_resolver: ProviderConfigResolver,
        endpoint_builder: CallbackEndpointBuilder,
        authenticator: Authenticator,
        normalizer: ProfileNormalizer,
        reconciler: AccountReconciler,
        session_establisher: SessionEstablisher,
        redirect_cookies: RedirectCookieManager,
        cookie_scope: CookieScope,
        providers: Iterable[str] = DEFAULT_PROVIDERS,
    ):
        self.store = store
        self.session = session
        self.config_resolver = config_resolver
        self.endpoint_builder = endpoint_builder
        self.authenticator = authenticator
        self.normalizer = normalizer
        self.reconciler = reconciler
        self.session_establisher = session_establisher
        self.redirect_cookies = redirect_cookies
        self.cookie_scope = cookie_scope
        self.providers = {p.lower() for p in providers}

    async def login(self, provider: str) -> LoginResult:
        """Authenticate with a provider and log the resulting account in.

        A handshake that does not connect (the user declined, or the
        Authenticator reported a failure) changes nothing and raises nothing;
        the returned result says which.

        Raises:
            UnsupportedProviderError: If the provider is not configured
            HandshakeError: If the Authenticator raises
            AuthorizationRedirect: If the browser must visit the provider first
        """
        provider = self._check_provider(provider)
        handshake = await self._handshake(provider)
        if handshake.status == HandshakeStatus.FAILED:
            logger.error(f"{provider} handshake failed: {handshake.error_message}")
            return LoginResult.failed(handshake.error_message or "Handshake failed")
        if not handshake.is_connected:
            logger.warning(f"{provider} login not connected for store {self.store.store_code}")
            return LoginResult.not_connected()

        identity = self.normalizer.normalize(handshake.profile)
        account = await self.reconciler.reconcile(identity, self.store, provider=provider)
        await self.session_establisher.login(self.session, account)
        return LoginResult(status=LoginStatus.CONNECTED, account=account)

    async def login_with_referer(
        self, provider: str, is_secure: bool = True, referer: Optional[str] = None
    ) -> LoginResult:
        """Like login(), remembering where to send the browser afterwards.

        The referer is stashed in the redirect cookie before the handshake
        starts; a connected login returns whatever the cookie holds. Any
        other outcome is returned as NOT_CONNECTED or FAILED with no
        redirect URL.
        """
        provider = self._check_provider(provider)
        self.redirect_cookies.stash(referer, is_secure, self.cookie_scope)

        result = await self.login(provider)
        if result.is_connected:
            result.redirect_url = self.redirect_cookies.retrieve()
        return result

    async def _handshake(self, provider: str) -> HandshakeResult:
        config = await self.config_resolver.resolve(provider)
        callback_url = self.endpoint_builder.build_callback(provider)
        return await self.authenticator.authenticate(provider, config, callback_url)

    def _check_provider(self, provider: str) -> str:
        normalized = (provider or "").strip().lower()
        if normalized not in self.providers:
            raise UnsupportedProviderError(provider)
        return normalized
