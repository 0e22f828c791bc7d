"""Unit tests for RedirectCookieManager and the request cookie jar"""

import pytest
from fastapi import Response

from social_login.core.social.redirect_cookie import (
    COOKIE_DURATION,
    COOKIE_NAME,
    RedirectCookieManager,
)
from social_login.domain.models import CookieScope
from social_login.infrastructure.http.cookies import CookieManager

pytestmark = pytest.mark.unit

SECRET = "test-session-secret"


@pytest.fixture
def cookies():
    return CookieManager()


@pytest.fixture
def redirect_cookies(cookies):
    return RedirectCookieManager(cookies, SECRET)


@pytest.mark.parametrize("destination", [
    "https://site/cart",
    "/checkout?step=2",
    "https://shop.example.com/über/ünïcode",
])
def test_stash_then_retrieve(redirect_cookies, destination):
    redirect_cookies.stash(destination, True, CookieScope())

    assert redirect_cookies.retrieve() == destination


@pytest.mark.parametrize("destination", ["", None])
def test_empty_destination_not_written(redirect_cookies, cookies, destination):
    redirect_cookies.stash(destination, True, CookieScope())

    assert COOKIE_NAME not in cookies.pending
    assert redirect_cookies.retrieve() is None


def test_retrieve_never_set(redirect_cookies):
    assert redirect_cookies.retrieve() is None


def test_cookie_metadata(redirect_cookies, cookies):
    redirect_cookies.stash("/cart", False, CookieScope(path="/shop", domain="example.com"))

    value, metadata = cookies.pending[COOKIE_NAME]
    assert value != "/cart"  # signed
    assert metadata.duration == COOKIE_DURATION == 86400
    assert metadata.path == "/shop"
    assert metadata.domain == "example.com"
    assert metadata.secure is False
    assert metadata.http_only is True


def test_secure_flag_mirrors_request(redirect_cookies, cookies):
    redirect_cookies.stash("/cart", True, CookieScope())

    assert cookies.pending[COOKIE_NAME][1].secure is True


def test_cookie_from_previous_request(redirect_cookies, cookies):
    """Value written on the first request is read back on the callback request"""
    redirect_cookies.stash("/cart", True, CookieScope())
    value, _ = cookies.pending[COOKIE_NAME]

    callback = RedirectCookieManager(CookieManager({COOKIE_NAME: value}), SECRET)

    assert callback.retrieve() == "/cart"


def test_tampered_cookie_ignored():
    manager = RedirectCookieManager(CookieManager({COOKIE_NAME: "https://evil.example"}), SECRET)

    assert manager.retrieve() is None


def test_cookie_signed_with_other_secret_ignored(redirect_cookies, cookies):
    redirect_cookies.stash("/cart", True, CookieScope())
    value, _ = cookies.pending[COOKIE_NAME]

    other = RedirectCookieManager(CookieManager({COOKIE_NAME: value}), "another-secret")

    assert other.retrieve() is None


def test_stash_overwrites_previous_value(redirect_cookies):
    redirect_cookies.stash("/first", True, CookieScope())
    redirect_cookies.stash("/second", True, CookieScope())

    assert redirect_cookies.retrieve() == "/second"


def test_apply_sets_response_cookie(redirect_cookies, cookies):
    redirect_cookies.stash("/cart", True, CookieScope(path="/"))

    response = cookies.apply(Response())

    header = response.headers["set-cookie"]
    assert header.startswith(f"{COOKIE_NAME}=")
    assert "HttpOnly" in header
    assert "Secure" in header
    assert "Max-Age=86400" in header
