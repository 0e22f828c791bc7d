"""Social login core.

Delegates authentication to an identity provider through a pluggable
Authenticator and reconciles the returned profile with a local account:
- facebook, google, windowslive out of the box (OAuth 2.0)
- further providers via configuration
"""

from .errors import (
    AccountConflictError,
    AccountReconciliationError,
    AuthorizationRedirect,
    HandshakeError,
    MissingEmailError,
    ProviderConfigurationError,
    SocialLoginError,
    UnsupportedProviderError,
)
from .provider import Authenticator, HandshakeResult, HandshakeStatus, RawProfile

__all__ = [
    "AccountConflictError",
    "AccountReconciliationError",
    "Authenticator",
    "AuthorizationRedirect",
    "HandshakeError",
    "HandshakeResult",
    "HandshakeStatus",
    "MissingEmailError",
    "ProviderConfigurationError",
    "RawProfile",
    "SocialLoginError",
    "UnsupportedProviderError",
]
