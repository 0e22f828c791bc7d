"""Post-login redirect target carried across the provider round trip."""

import logging
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from social_login.domain.models import CookieMetadata, CookieScope
from social_login.infrastructure.http.cookies import CookieManager

logger = logging.getLogger(__name__)

COOKIE_NAME = "social_login_redirect"
COOKIE_DURATION = 86400  # seconds


class RedirectCookieManager:
    """Stores the referer before the handshake and hands it back afterwards.

    The value is signed and stamped; a tampered or expired cookie reads as
    absent.
    """

    def __init__(self, cookie_manager: CookieManager, secret_key: str):
        self.cookie_manager = cookie_manager
        self.serializer = URLSafeTimedSerializer(secret_key, salt="social-login-redirect")

    def stash(self, destination: Optional[str], secure: bool, scope: CookieScope) -> None:
        """Write the redirect cookie; no-op for an empty destination"""
        if not destination:
            return

        metadata = CookieMetadata(
            duration=COOKIE_DURATION,
            path=scope.path,
            domain=scope.domain,
            secure=bool(secure),
            http_only=True,
        )
        self.cookie_manager.set_cookie(COOKIE_NAME, self.serializer.dumps(destination), metadata)

    def retrieve(self) -> Optional[str]:
        """Stored redirect target, None if never set or no longer valid"""
        raw = self.cookie_manager.get_cookie(COOKIE_NAME)
        if not raw:
            return None

        try:
            return self.serializer.loads(raw, max_age=COOKIE_DURATION)
        except SignatureExpired:
            logger.info("Redirect cookie expired")
        except BadSignature:
            logger.warning("Redirect cookie signature mismatch, ignoring")
        return None
