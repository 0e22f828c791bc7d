"""Request-scoped cookie jar

Reads cookies sent with the request and collects cookies to send back.
Cookies set during the request are visible to later reads in the same
request; apply() copies them onto the outgoing response.
"""

from typing import Dict, Mapping, Optional, Tuple

from fastapi import Response

from social_login.domain.models import CookieMetadata


class CookieManager:
    """Cookie access for one request/response cycle"""

    def __init__(self, request_cookies: Mapping[str, str] = None):
        self._incoming: Dict[str, str] = dict(request_cookies or {})
        self._outgoing: Dict[str, Tuple[str, CookieMetadata]] = {}

    def get_cookie(self, name: str) -> Optional[str]:
        """Cookie value, preferring one set during this request"""
        if name in self._outgoing:
            return self._outgoing[name][0]
        return self._incoming.get(name)

    def set_cookie(self, name: str, value: str, metadata: CookieMetadata) -> None:
        """Queue a cookie for the response"""
        self._outgoing[name] = (value, metadata)

    @property
    def pending(self) -> Dict[str, Tuple[str, CookieMetadata]]:
        return dict(self._outgoing)

    def apply(self, response: Response) -> Response:
        """Write queued cookies onto a response"""
        for name, (value, metadata) in self._outgoing.items():
            response.set_cookie(
                key=name,
                value=value,
                max_age=metadata.duration,
                path=metadata.path,
                domain=metadata.domain,
                secure=metadata.secure,
                httponly=metadata.http_only,
                samesite=metadata.same_site,
            )
        return response
