"""Account Storage System

Purpose: Handle customer account storage and retrieval operations

Accounts are partitioned by website; within a website an email address
maps to at most one account. The account record is written first and the
email index entry is then claimed with an atomic insert-if-absent, so the
index never points at a record that was not written and two concurrent
creations for the same (website, email) cannot both succeed.

An index entry whose record is gone is treated as absent: the next creation
swaps it for its own account id with an atomic compare-and-set.

Storage Schema:
- social_login:account:{account_id} -> {account_json}
- social_login:account_email:{website_id}:{email} -> {account_id}
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from redis.asyncio import Redis

from social_login.core.social.errors import AccountConflictError
from social_login.domain.models import CanonicalIdentity, LocalAccount

logger = logging.getLogger(__name__)

# Replaces KEYS[1] with ARGV[2] only while it still holds ARGV[1].
# Returns 1 if swapped, 0 otherwise.
_REPLACE_INDEX_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    redis.call('SET', KEYS[1], ARGV[2])
    return 1
end
return 0
"""

CLAIM_ATTEMPTS = 3


class AccountStore:
    """Customer account storage backed by Redis"""

    def __init__(self, redis_client: Redis):
        """Initialize account store

        Args:
            redis_client: Redis connection for account storage
        """
        self.redis = redis_client

        # Redis key patterns
        self.account_key_pattern = "social_login:account:{}"
        self.email_key_pattern = "social_login:account_email:{}:{}"

    async def get_account(self, account_id: str) -> Optional[LocalAccount]:
        """Get account by ID

        Args:
            account_id: Account identifier

        Returns:
            LocalAccount if found, None otherwise
        """
        if not account_id:
            return None

        account_data = await self._redis_get(self.account_key_pattern.format(account_id))
        if not account_data:
            return None

        return LocalAccount.from_dict(json.loads(account_data))

    async def get_account_by_email(self, website_id: str, email: str) -> Optional[LocalAccount]:
        """Get account by email address within a website

        Args:
            website_id: Website the account belongs to
            email: Email address (case-insensitive)

        Returns:
            LocalAccount if found, None otherwise (including an index entry
            whose record no longer exists)
        """
        if not email:
            return None

        account_id = await self._redis_get(self._email_key(website_id, email))
        if not account_id:
            return None

        account = await self.get_account(account_id)
        if account is None:
            logger.warning(
                f"Email index for '{email}' in website {website_id} "
                f"points at missing account {account_id}"
            )
        return account

    async def create_account(
        self, website_id: str, identity: CanonicalIdentity, provider: str = None
    ) -> LocalAccount:
        """Create a new account for an identity

        Args:
            website_id: Website to create the account in
            identity: Canonical identity supplying email and names
            provider: Provider the identity came from

        Returns:
            Created LocalAccount

        Raises:
            AccountConflictError: If the email is already taken in the website
        """
        account = LocalAccount(
            account_id=str(uuid.uuid4()),
            website_id=website_id,
            created_at=datetime.now(timezone.utc),
            provider=provider,
            **identity.to_dict(),
        )
        account_key = self.account_key_pattern.format(account.account_id)
        email_key = self._email_key(website_id, identity.email)

        await self._redis_set(account_key, json.dumps(account.to_dict()))

        if not await self._claim_email(email_key, account.account_id):
            await self.redis.delete(account_key)
            logger.warning(f"Email '{identity.email}' already claimed in website {website_id}")
            raise AccountConflictError(website_id, identity.email)

        logger.info(
            f"Created account {account.account_id} for '{account.email}' "
            f"in website {website_id} via {provider}"
        )
        return account

    async def _claim_email(self, email_key: str, account_id: str) -> bool:
        """Point the email index at account_id unless a live account holds it"""
        for _ in range(CLAIM_ATTEMPTS):
            if await self._redis_set(email_key, account_id, nx=True):
                return True

            current_id = await self._redis_get(email_key)
            if not current_id:
                # released between the two calls
                continue
            if await self.get_account(current_id):
                return False
            if await self.redis.eval(_REPLACE_INDEX_SCRIPT, 1, email_key, current_id, account_id):
                logger.warning(f"Replaced stale index {email_key} -> {current_id} with {account_id}")
                return True
        return False

    def _email_key(self, website_id: str, email: str) -> str:
        return self.email_key_pattern.format(website_id, email.strip().lower())

    # Redis async wrapper methods
    async def _redis_set(self, key: str, value: str, nx: bool = False):
        """Set Redis key"""
        try:
            return await self.redis.set(key, value, nx=nx)
        except Exception as e:
            logger.error(f"Redis SET failed for key {key}: {e}")
            raise

    async def _redis_get(self, key: str) -> Optional[str]:
        """Get Redis key value"""
        try:
            result = await self.redis.get(key)
        except Exception as e:
            logger.error(f"Redis GET failed for key {key}: {e}")
            raise
        if not result:
            return None
        return result.decode() if isinstance(result, bytes) else result
