"""
Pytest configuration and fixtures for social login tests.

Provides fixtures for:
- In-memory Redis double
- Tenant scope and scoped configuration
- Account and session stores
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from social_login.config.scope_config import StaticScopeConfig
from social_login.domain.models import StoreContext
from social_login.infrastructure.accounts.account_store import AccountStore
from social_login.infrastructure.session.session_store import SessionStore


class InMemoryRedis:
    """Dict-backed stand-in for the subset of redis.asyncio.Redis the service uses.

    Values are stored as strings, as with decode_responses=True. Every command
    yields to the event loop before it runs, so concurrent callers interleave
    between commands the way they do against a real server; each command
    itself is atomic.
    """

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.ttls: Dict[str, int] = {}

    async def get(self, key: str) -> Optional[str]:
        await asyncio.sleep(0)
        return self.data.get(key)

    async def getdel(self, key: str) -> Optional[str]:
        await asyncio.sleep(0)
        self.ttls.pop(key, None)
        return self.data.pop(key, None)

    async def set(self, key: str, value, ex: int = None, nx: bool = False):
        await asyncio.sleep(0)
        if nx and key in self.data:
            return None
        self.data[key] = str(value)
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        await asyncio.sleep(0)
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def eval(self, script: str, numkeys: int, *args) -> int:
        """Compare-and-set: KEYS[1] becomes ARGV[2] only while it holds ARGV[1].

        The account store's index repair is the only script the service runs.
        """
        await asyncio.sleep(0)
        (key,), (expected, replacement) = args[:numkeys], args[numkeys:]
        if self.data.get(key) != expected:
            return 0
        self.data[key] = str(replacement)
        return 1

    async def hget(self, key: str, field: str) -> Optional[str]:
        await asyncio.sleep(0)
        return self.hashes.get(key, {}).get(field)

    async def ping(self) -> bool:
        return True

    def account_ids(self) -> List[str]:
        """Ids of all stored account records"""
        prefix = "social_login:account:"
        return sorted(key[len(prefix):] for key in self.data if key.startswith(prefix))


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    """In-memory Redis"""
    return InMemoryRedis()


@pytest.fixture
def store_context() -> StoreContext:
    """Default store of website 1"""
    return StoreContext(store_code="default", website_id="1")


@pytest.fixture
def provider_settings() -> Dict[str, Dict[str, str]]:
    """Scoped configuration enabling google and facebook"""
    return {
        "default": {
            "social_login/google/enabled": "1",
            "social_login/google/api_key": "google-client-id",
            "social_login/google/api_secret": "google-client-secret",
            "social_login/facebook/enabled": "1",
            "social_login/facebook/api_key": "fb-app-id",
            "social_login/facebook/api_secret": "fb-app-secret",
        }
    }


@pytest.fixture
def scope_config(provider_settings) -> StaticScopeConfig:
    return StaticScopeConfig(provider_settings)


@pytest.fixture
def account_store(fake_redis) -> AccountStore:
    return AccountStore(fake_redis)


@pytest.fixture
def session_store(fake_redis) -> SessionStore:
    return SessionStore(fake_redis, ttl_seconds=3600)
