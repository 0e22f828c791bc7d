"""Provider callback URL construction."""

from urllib.parse import urlencode, urlsplit, urlunsplit

CALLBACK_ROUTE = "sociallogin/endpoint/index"


class CallbackEndpointBuilder:
    """Builds the URL identity providers redirect back to after consent.

    Providers compare the callback against the value registered with them,
    so the output depends only on the provider and the base URL.
    """

    def __init__(self, base_url: str, secure_base_url: str = None):
        self.base_url = _secure_base(secure_base_url or base_url)

    def build_callback(self, provider: str) -> str:
        """Absolute https callback URL carrying the provider as a query parameter"""
        return f"{self.base_url}/{CALLBACK_ROUTE}?{urlencode({'provider': provider})}"


def _secure_base(url: str) -> str:
    parts = urlsplit(url.strip())
    path = parts.path.rstrip("/")
    return urlunsplit(("https", parts.netloc, path, "", ""))
