"""Session Storage

Purpose: Persist server-side customer sessions with a sliding TTL

Storage Schema:
- social_login:session:{session_id} -> {session_json} (expires after ttl_seconds)
"""

import json
import logging
import secrets
from typing import Optional

from redis.asyncio import Redis

from social_login.domain.models import CustomerSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Customer session storage backed by Redis"""

    def __init__(self, redis_client: Redis, ttl_seconds: int = 3600):
        """Initialize session store

        Args:
            redis_client: Redis connection for session storage
            ttl_seconds: Session lifetime, renewed on every save
        """
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.session_key_pattern = "social_login:session:{}"

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)

    async def load(self, session_id: Optional[str]) -> CustomerSession:
        """Load a session, starting a fresh one if it is unknown or expired

        Args:
            session_id: Session identifier from the session cookie

        Returns:
            Stored CustomerSession, or an empty one
        """
        if session_id:
            data = await self.redis.get(self.session_key_pattern.format(session_id))
            if data:
                return CustomerSession.from_dict(json.loads(data))
            logger.debug(f"Session {session_id[:8]}... not found, starting new session")

        return CustomerSession(session_id=self.new_session_id())

    async def save(self, session: CustomerSession) -> None:
        """Persist a session and renew its TTL"""
        key = self.session_key_pattern.format(session.session_id)
        try:
            await self.redis.set(key, json.dumps(session.to_dict()), ex=self.ttl_seconds)
        except Exception as e:
            logger.error(f"Failed to save session {session.session_id[:8]}...: {e}")
            raise

    async def delete(self, session_id: str) -> None:
        """Remove a stored session"""
        try:
            await self.redis.delete(self.session_key_pattern.format(session_id))
        except Exception as e:
            logger.error(f"Failed to delete session {session_id[:8]}...: {e}")
            raise
