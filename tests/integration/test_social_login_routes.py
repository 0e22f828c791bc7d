"""Integration tests for the social login endpoints

Runs the full browser round trip against the ASGI app:
/sociallogin/login -> provider consent page -> /sociallogin/endpoint/index
with provider HTTP calls served by httpx.MockTransport and Redis replaced by
the in-memory double.
"""

import json
import logging
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from social_login.api.routes import social_login as routes
from social_login.config.settings import Settings, get_settings
from social_login.core.social.factory import get_provider_endpoints
from social_login.core.social.oauth import OAuth2Authenticator
from social_login.main import app

pytestmark = pytest.mark.integration

BASE_URL = "http://shop.example.com"
GOOGLE_PROFILE = {
    "sub": "10769150350006150715113082367",
    "given_name": "Ann",
    "email": "a@x.com",
    "name": "Ann",
}


@pytest.fixture
def settings(provider_settings):
    return Settings(
        base_url=BASE_URL,
        config_backend="static",
        social_login_config=provider_settings,
        session_secret="integration-secret",
    )


@pytest.fixture
def provider_requests():
    return []


@pytest.fixture
def client(settings, fake_redis, provider_requests, monkeypatch):
    """Async client with Redis, settings and provider HTTP replaced"""

    def handler(request: httpx.Request) -> httpx.Response:
        provider_requests.append(request)
        if request.method == "POST":
            return httpx.Response(200, json={"access_token": "access-123"})
        return httpx.Response(200, json=GOOGLE_PROFILE)

    def create_authenticator(settings, redis_client, session_id, params):
        return OAuth2Authenticator(
            redis_client=redis_client,
            session_id=session_id,
            params=params,
            endpoints=get_provider_endpoints(settings),
            transport=httpx.MockTransport(handler),
        )

    async def get_redis():
        return fake_redis

    monkeypatch.setattr(routes, "create_authenticator", create_authenticator)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[routes.get_redis] = get_redis

    yield AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL)

    app.dependency_overrides.clear()


async def start_login(client: AsyncClient, headers=None, **params) -> str:
    """Request /sociallogin/login and return the state sent to the provider"""
    response = await client.get(
        "/sociallogin/login", params={"provider": "google", **params}, headers=headers
    )
    assert response.status_code == 302
    return parse_qs(urlsplit(response.headers["location"]).query)["state"][0]


class TestLoginRoundTrip:
    """Complete login through the provider consent page"""

    @pytest.mark.asyncio
    async def test_login_redirects_to_provider(self, client, fake_redis):
        async with client:
            response = await client.get(
                "/sociallogin/login", params={"provider": "google", "referer": "/cart"}
            )

        assert response.status_code == 302
        location = urlsplit(response.headers["location"])
        assert location.netloc == "accounts.google.com"
        query = parse_qs(location.query)
        assert query["redirect_uri"] == [
            "https://shop.example.com/sociallogin/endpoint/index?provider=google"
        ]
        assert "social_login_session" in response.cookies
        assert "social_login_redirect" in response.cookies

        session_id = response.cookies["social_login_session"]
        assert fake_redis.data[f"social_login:handshake:{session_id}:google"] == query["state"][0]

    @pytest.mark.asyncio
    async def test_callback_logs_in_and_returns_to_referer(self, client, fake_redis, provider_requests):
        async with client:
            state = await start_login(client, referer="/cart")
            anonymous_id = client.cookies["social_login_session"]
            response = await client.get(
                "/sociallogin/endpoint/index",
                params={"provider": "google", "code": "auth-code", "state": state},
            )

        assert response.status_code == 302
        assert response.headers["location"] == "/cart"
        assert len(provider_requests) == 2

        session_id = response.cookies["social_login_session"]
        assert session_id != anonymous_id
        assert f"social_login:session:{anonymous_id}" not in fake_redis.data
        session = json.loads(fake_redis.data[f"social_login:session:{session_id}"])
        account_id = fake_redis.data["social_login:account_email:1:a@x.com"]
        assert session["account_id"] == account_id

        account = json.loads(fake_redis.data[f"social_login:account:{account_id}"])
        assert account["firstname"] == "Ann"
        assert account["lastname"] == "-"
        assert account["provider"] == "google"

    @pytest.mark.asyncio
    async def test_referer_header_used_without_parameter(self, client):
        async with client:
            state = await start_login(client, headers={"Referer": "/checkout"})
            response = await client.get(
                "/sociallogin/endpoint/index",
                params={"provider": "google", "code": "auth-code", "state": state},
            )

        assert response.headers["location"] == "/checkout"

    @pytest.mark.asyncio
    async def test_foreign_referer_not_followed(self, client):
        async with client:
            state = await start_login(client, referer="https://evil.example/phish")
            response = await client.get(
                "/sociallogin/endpoint/index",
                params={"provider": "google", "code": "auth-code", "state": state},
            )

        assert response.status_code == 302
        assert response.headers["location"] == "/customer/account"

    @pytest.mark.asyncio
    async def test_repeat_login_reuses_account(self, client, fake_redis):
        async with client:
            for _ in range(2):
                state = await start_login(client)
                response = await client.get(
                    "/sociallogin/endpoint/index",
                    params={"provider": "google", "code": "auth-code", "state": state},
                )
                assert response.status_code == 302

        assert len(fake_redis.account_ids()) == 1


class TestLoginFailures:
    """Declined, misconfigured and rejected logins"""

    @pytest.mark.asyncio
    async def test_declined_consent(self, client, fake_redis, caplog):
        caplog.set_level(logging.INFO, logger=routes.__name__)
        async with client:
            await start_login(client, referer="/cart")
            response = await client.get(
                "/sociallogin/endpoint/index",
                params={"provider": "google", "error": "access_denied"},
            )

        assert response.status_code == 302
        assert response.headers["location"] == "/customer/account/login"
        assert "social_login:account_email:1:a@x.com" not in fake_redis.data
        assert "'status': 'not_connected'" in caplog.text

    @pytest.mark.asyncio
    async def test_unsupported_provider(self, client):
        async with client:
            response = await client.get("/sociallogin/login", params={"provider": "myspace"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_disabled_provider(self, client):
        async with client:
            response = await client.get("/sociallogin/login", params={"provider": "windowslive"})

        assert response.status_code == 502
        assert "disabled" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_error_response_keeps_session_cookie(self, client, fake_redis):
        """Failed first visit still carries the new session and the stashed referer"""
        async with client:
            response = await client.get(
                "/sociallogin/login", params={"provider": "windowslive", "referer": "/cart"}
            )

        assert response.status_code == 502
        assert "social_login_redirect" in response.cookies
        session_id = response.cookies["social_login_session"]
        assert f"social_login:session:{session_id}" in fake_redis.data

    @pytest.mark.asyncio
    async def test_forged_state(self, client, fake_redis):
        async with client:
            await start_login(client)
            response = await client.get(
                "/sociallogin/endpoint/index",
                params={"provider": "google", "code": "auth-code", "state": "forged"},
            )

        assert response.status_code == 502
        assert "social_login:account_email:1:a@x.com" not in fake_redis.data

    @pytest.mark.asyncio
    async def test_missing_provider_parameter(self, client):
        async with client:
            response = await client.get("/sociallogin/login")

        assert response.status_code == 422


@pytest.mark.asyncio
async def test_health(monkeypatch):
    redis_client = MagicMock()
    redis_client.health_check = AsyncMock(return_value=True)
    monkeypatch.setattr("social_login.main.get_redis_client", AsyncMock(return_value=redis_client))

    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["redis"] == "ok"

