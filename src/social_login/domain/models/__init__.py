"""Domain models for Social Login Service"""

from social_login.domain.models.social import (
    MISSING_FIELD,
    CanonicalIdentity,
    CookieMetadata,
    CookieScope,
    CustomerSession,
    LocalAccount,
    LoginResult,
    LoginStatus,
    ProviderConfig,
    StoreContext,
    parse_utc_timestamp,
    to_json_compatible,
)

__all__ = [
    "MISSING_FIELD",
    "CanonicalIdentity",
    "CookieMetadata",
    "CookieScope",
    "CustomerSession",
    "LocalAccount",
    "LoginResult",
    "LoginStatus",
    "ProviderConfig",
    "StoreContext",
    "parse_utc_timestamp",
    "to_json_compatible",
]
