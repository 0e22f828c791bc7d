"""Session principal assignment."""

import logging
from datetime import datetime, timezone

from social_login.domain.models import CustomerSession, LocalAccount
from social_login.infrastructure.session.session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionEstablisher:
    """Marks an account as the authenticated principal of a session."""

    def __init__(self, session_store: SessionStore):
        self.session_store = session_store

    async def login(self, session: CustomerSession, account: LocalAccount) -> None:
        """Replace the session principal with the account and persist the session

        The session moves to a fresh id; the record under the previous id is
        removed, so an id known before login never carries the principal.
        """
        previous_id = session.session_id
        session.session_id = self.session_store.new_session_id()
        session.account_id = account.account_id
        session.website_id = account.website_id
        session.logged_in_at = datetime.now(timezone.utc)

        await self.session_store.save(session)
        await self.session_store.delete(previous_id)
        logger.info(f"Account {account.account_id} logged in (session {session.session_id[:8]}...)")
