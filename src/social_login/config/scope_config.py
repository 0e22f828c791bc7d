"""Scoped configuration storage

Purpose: Key-value configuration lookup evaluated per tenant scope

Values are looked up at store scope first, then at the store's website,
then at the default scope, so a store only needs to override what differs.

Storage Schema (Redis backend):
- social_login:config:stores:{store_code} -> hash {path: value}
- social_login:config:websites:{website_id} -> hash {path: value}
- social_login:config:default -> hash {path: value}
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from redis.asyncio import Redis

from social_login.domain.models import StoreContext

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "default"


def scope_chain(store: StoreContext) -> List[str]:
    """Scope keys to consult, most specific first"""
    return [
        f"stores:{store.store_code}",
        f"websites:{store.website_id}",
        DEFAULT_SCOPE,
    ]


class ScopeConfig(ABC):
    """Read-only scoped configuration"""

    async def get_value(self, path: str, store: StoreContext) -> Optional[str]:
        """Get configuration value for a store

        Args:
            path: Configuration path (e.g. 'social_login/google/enabled')
            store: Tenant scope of the request

        Returns:
            Most specific value set for the path, None if unset everywhere
        """
        for scope in scope_chain(store):
            value = await self._read(scope, path)
            if value is not None:
                return value
        return None

    @abstractmethod
    async def _read(self, scope: str, path: str) -> Optional[str]:
        """Read a value from one scope only"""
        pass


class StaticScopeConfig(ScopeConfig):
    """Configuration held in memory (from settings or test fixtures)

    Args:
        values: {scope: {path: value}} with scope keys as in scope_chain()
    """

    def __init__(self, values: Dict[str, Dict[str, str]] = None):
        self.values = {scope: dict(paths) for scope, paths in (values or {}).items()}

    async def _read(self, scope: str, path: str) -> Optional[str]:
        value = self.values.get(scope, {}).get(path)
        return None if value is None else str(value)


class RedisScopeConfig(ScopeConfig):
    """Configuration stored in Redis hashes, one hash per scope"""

    def __init__(self, redis_client: Redis):
        """Initialize config store

        Args:
            redis_client: Redis connection for configuration storage
        """
        self.redis = redis_client
        self.scope_key_pattern = "social_login:config:{}"

    async def _read(self, scope: str, path: str) -> Optional[str]:
        key = self.scope_key_pattern.format(scope)
        try:
            value = await self.redis.hget(key, path)
        except Exception as e:
            logger.error(f"Redis HGET failed for {key} {path}: {e}")
            raise
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else str(value)
