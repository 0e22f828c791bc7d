"""Identity to local account reconciliation."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Tuple

from social_login.core.social.errors import AccountConflictError, MissingEmailError
from social_login.domain.models import CanonicalIdentity, LocalAccount, StoreContext
from social_login.infrastructure.accounts.account_store import AccountStore

logger = logging.getLogger(__name__)

# Per-(website, email) creation locks shared by every reconciler in the process.
# The store's insert-if-absent covers concurrent creators in other processes.
_creation_locks: Dict[Tuple[str, str], asyncio.Lock] = {}
_creation_waiters: Dict[Tuple[str, str], int] = {}


class AccountReconciler:
    """Finds the account for an identity within a website, or creates it.

    An existing account is returned as stored: later logins never update it.
    """

    def __init__(self, account_store: AccountStore):
        self.account_store = account_store

    async def reconcile(
        self, identity: CanonicalIdentity, store: StoreContext, provider: str = None
    ) -> LocalAccount:
        """Resolve an identity to exactly one account

        Args:
            identity: Canonical identity from the provider profile
            store: Tenant scope; accounts are unique per website
            provider: Provider the identity came from (recorded on creation)

        Returns:
            The existing or newly created LocalAccount

        Raises:
            MissingEmailError: If the identity has no email
            AccountConflictError: If creation lost a race and the winner is unreadable
        """
        if not identity.has_email:
            raise MissingEmailError("Provider profile has no email address")

        website_id = store.website_id
        key = (website_id, identity.email.strip().lower())

        async with _creation_lock(key):
            account = await self.account_store.get_account_by_email(website_id, identity.email)
            if account:
                logger.info(f"Matched account {account.account_id} for '{identity.email}'")
                return account

            try:
                return await self.account_store.create_account(website_id, identity, provider)
            except AccountConflictError:
                account = await self.account_store.get_account_by_email(website_id, identity.email)
                if account is None:
                    raise
                logger.info(
                    f"Account for '{identity.email}' created concurrently; "
                    f"using {account.account_id}"
                )
                return account


@asynccontextmanager
async def _creation_lock(key: Tuple[str, str]):
    """Hold the shared creation lock for one key"""
    lock = _creation_locks.setdefault(key, asyncio.Lock())
    _creation_waiters[key] = _creation_waiters.get(key, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _creation_waiters[key] -= 1
        if not _creation_waiters[key]:
            del _creation_waiters[key]
            del _creation_locks[key]
