"""Social Login Routes

Browser-facing endpoints driving the social login flow.

Key Endpoints:
- GET /sociallogin/login: Start (or resume) a login with a provider
- GET /sociallogin/endpoint/index: Provider callback after consent
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from redis.asyncio import Redis

from social_login.config.scope_config import RedisScopeConfig, ScopeConfig, StaticScopeConfig
from social_login.config.settings import Settings, get_settings
from social_login.core.social.config_resolver import ProviderConfigResolver
from social_login.core.social.endpoint import CallbackEndpointBuilder
from social_login.core.social.errors import (
    AccountConflictError,
    AuthorizationRedirect,
    HandshakeError,
    MissingEmailError,
    UnsupportedProviderError,
)
from social_login.core.social.factory import create_authenticator
from social_login.core.social.flow import SocialLoginFlow
from social_login.core.social.normalizer import ProfileNormalizer
from social_login.core.social.reconciler import AccountReconciler
from social_login.core.social.redirect_cookie import RedirectCookieManager
from social_login.core.social.session import SessionEstablisher
from social_login.domain.models import CookieMetadata, CookieScope, LoginResult, StoreContext
from social_login.infrastructure.accounts.account_store import AccountStore
from social_login.infrastructure.http.cookies import CookieManager
from social_login.infrastructure.redis.client import get_redis_client
from social_login.infrastructure.session.session_store import SessionStore

router = APIRouter(prefix="/sociallogin", tags=["social-login"])
logger = logging.getLogger(__name__)


# ============================================================================
# Dependencies
# ============================================================================

@dataclass
class LoginContext:
    """Request-scoped flow plus the cookie jar its response must carry."""
    flow: SocialLoginFlow
    cookies: CookieManager
    is_secure: bool
    session_cookie: CookieMetadata
    cookie_session_id: Optional[str] = None


async def get_redis() -> Redis:
    redis_client = await get_redis_client()
    return redis_client.get_client()


def get_store_context(settings: Settings = Depends(get_settings)) -> StoreContext:
    return StoreContext(store_code=settings.store_code, website_id=settings.website_id)


def get_scope_config(
    settings: Settings = Depends(get_settings),
    redis: Redis = Depends(get_redis),
) -> ScopeConfig:
    if settings.config_backend == "static":
        return StaticScopeConfig(settings.social_login_config)
    return RedisScopeConfig(redis)


async def get_login_context(
    request: Request,
    settings: Settings = Depends(get_settings),
    redis: Redis = Depends(get_redis),
    store: StoreContext = Depends(get_store_context),
    scope_config: ScopeConfig = Depends(get_scope_config),
) -> LoginContext:
    """Wire the social login flow for the current request."""
    is_secure = request.url.scheme == "https"
    cookie_scope = CookieScope(path=settings.session_cookie_path, domain=settings.session_cookie_domain)
    cookies = CookieManager(request.cookies)

    session_store = SessionStore(redis, ttl_seconds=settings.session_ttl_seconds)
    session_id = request.cookies.get(settings.session_cookie_name)
    session = await session_store.load(session_id)
    if session.session_id != session_id:
        # handshake state is keyed by session, so the id must survive the provider round trip
        await session_store.save(session)

    flow = SocialLoginFlow(
        store=store,
        session=session,
        config_resolver=ProviderConfigResolver(scope_config, store),
        endpoint_builder=CallbackEndpointBuilder(settings.base_url, settings.secure_base_url),
        authenticator=create_authenticator(settings, redis, session.session_id, request.query_params),
        normalizer=ProfileNormalizer(),
        reconciler=AccountReconciler(AccountStore(redis)),
        session_establisher=SessionEstablisher(session_store),
        redirect_cookies=RedirectCookieManager(cookies, settings.session_secret),
        cookie_scope=cookie_scope,
        providers=settings.social_login_providers,
    )
    return LoginContext(
        flow=flow,
        cookies=cookies,
        is_secure=is_secure,
        session_cookie=CookieMetadata(
            duration=settings.session_ttl_seconds,
            path=cookie_scope.path,
            domain=cookie_scope.domain,
            secure=is_secure,
        ),
        cookie_session_id=session_id,
    )


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/login")
async def social_login(
    request: Request,
    provider: str = Query(..., description="Social login provider"),
    referer: Optional[str] = Query(None, description="Where to return after login"),
    ctx: LoginContext = Depends(get_login_context),
    settings: Settings = Depends(get_settings),
):
    """Start a social login.

    Remembers the referer (query parameter, else the Referer header) and
    redirects the browser to the provider's consent page.
    """
    referer = referer or request.headers.get("referer")
    return await _run_flow(
        lambda: ctx.flow.login_with_referer(provider, ctx.is_secure, referer), ctx, settings
    )


@router.get("/endpoint/index")
async def social_login_callback(
    provider: str = Query(..., description="Social login provider"),
    ctx: LoginContext = Depends(get_login_context),
    settings: Settings = Depends(get_settings),
):
    """Provider callback: completes the handshake and logs the account in."""
    return await _run_flow(
        lambda: ctx.flow.login_with_referer(provider, ctx.is_secure, None), ctx, settings
    )


# ============================================================================
# Helper Functions
# ============================================================================

async def _run_flow(
    step: Callable[[], Awaitable[LoginResult]],
    ctx: LoginContext,
    settings: Settings,
) -> Response:
    try:
        result = await step()
    except AuthorizationRedirect as e:
        return _respond(ctx, settings, RedirectResponse(e.url, status_code=status.HTTP_302_FOUND))
    except UnsupportedProviderError as e:
        return _error_response(ctx, settings, status.HTTP_400_BAD_REQUEST, e)
    except HandshakeError as e:
        logger.warning(f"Social login handshake failed ({e.provider}): {e}")
        return _error_response(ctx, settings, status.HTTP_502_BAD_GATEWAY, e)
    except MissingEmailError as e:
        return _error_response(ctx, settings, status.HTTP_422_UNPROCESSABLE_ENTITY, e)
    except AccountConflictError as e:
        return _error_response(ctx, settings, status.HTTP_409_CONFLICT, e)

    logger.info(f"Social login finished: {result.to_dict()}")
    if result.is_connected:
        target = result.redirect_url
        if not is_safe_redirect(target, settings):
            target = settings.account_redirect_path
    else:
        target = settings.login_failure_path

    return _respond(ctx, settings, RedirectResponse(target, status_code=status.HTTP_302_FOUND))


def _respond(ctx: LoginContext, settings: Settings, response: Response) -> Response:
    """Write the session cookie, if the session id changed, and every queued cookie"""
    session_id = ctx.flow.session.session_id
    if session_id != ctx.cookie_session_id:
        ctx.cookies.set_cookie(settings.session_cookie_name, session_id, ctx.session_cookie)
    return ctx.cookies.apply(response)


def _error_response(ctx: LoginContext, settings: Settings, status_code: int, error: Exception) -> Response:
    return _respond(ctx, settings, JSONResponse({"detail": str(error)}, status_code=status_code))


def is_safe_redirect(url: Optional[str], settings: Settings) -> bool:
    """Relative paths, or absolute URLs on this service's own host"""
    if not url:
        return False
    parts = urlsplit(url)
    if not parts.netloc:
        return parts.scheme == "" and url.startswith("/") and not url.startswith("//")
    allowed = {urlsplit(settings.base_url).netloc}
    if settings.secure_base_url:
        allowed.add(urlsplit(settings.secure_base_url).netloc)
    return parts.scheme in ("http", "https") and parts.netloc in allowed
