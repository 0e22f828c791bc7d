"""Social Login Data Models

Purpose: Define data structures for provider configuration, identities,
local accounts and sessions

Key Components:
- ProviderConfig: Scoped enablement flag and credential pair for a provider
- CanonicalIdentity: Normalized first name / last name / email record
- LocalAccount: Tenant-scoped customer account keyed by (website_id, email)
- CustomerSession: Session record carrying the authenticated principal
- LoginResult: Outcome of a social login flow
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

# Stands in for any profile field the provider did not return
MISSING_FIELD = "-"


def parse_utc_timestamp(timestamp_str: str) -> datetime:
    """Parse UTC timestamp string to datetime object"""
    if isinstance(timestamp_str, datetime):
        return timestamp_str
    return datetime.fromisoformat(timestamp_str.replace('Z', '+00:00'))


def to_json_compatible(value):
    """Convert datetime to JSON-compatible ISO format string"""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class StoreContext:
    """Tenant scope of a request

    Attributes:
        store_code: Store view the request runs in (configuration scope)
        website_id: Website the store belongs to (account scope)
    """
    store_code: str
    website_id: str


@dataclass(frozen=True)
class ProviderConfig:
    """Provider enablement and credentials, read per request"""
    enabled: bool
    key: str
    secret: str

    @property
    def has_credentials(self) -> bool:
        return bool(self.key and self.secret)


@dataclass(frozen=True)
class CanonicalIdentity:
    """Identity record derived from a provider profile.

    Every field is always present; missing source values hold MISSING_FIELD.
    """
    firstname: str
    lastname: str
    email: str

    @property
    def has_email(self) -> bool:
        return bool(self.email) and self.email != MISSING_FIELD

    def to_dict(self) -> dict:
        return {
            "firstname": self.firstname,
            "lastname": self.lastname,
            "email": self.email,
        }


@dataclass
class LocalAccount:
    """Customer account

    Attributes:
        account_id: Unique identifier (UUID format)
        website_id: Website the account belongs to
        email: Email address, unique within the website
        firstname: First name (or "-")
        lastname: Last name (or "-")
        created_at: Account creation timestamp
        provider: Social provider that created the account
        is_active: Account active status
    """
    account_id: str
    website_id: str
    email: str
    firstname: str
    lastname: str
    created_at: datetime
    provider: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "account_id": self.account_id,
            "website_id": self.website_id,
            "email": self.email,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "created_at": to_json_compatible(self.created_at),
            "provider": self.provider,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LocalAccount':
        """Create from dictionary (JSON deserialization)"""
        return cls(
            account_id=data["account_id"],
            website_id=data["website_id"],
            email=data["email"],
            firstname=data.get("firstname", MISSING_FIELD),
            lastname=data.get("lastname", MISSING_FIELD),
            created_at=parse_utc_timestamp(data["created_at"]),
            provider=data.get("provider"),
            is_active=data.get("is_active", True),
        )


@dataclass
class CustomerSession:
    """Server-side session

    account_id/website_id/logged_in_at form the principal; they are
    replaced together on every successful login.
    """
    session_id: str
    account_id: Optional[str] = None
    website_id: Optional[str] = None
    logged_in_at: Optional[datetime] = None

    @property
    def is_logged_in(self) -> bool:
        return self.account_id is not None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "account_id": self.account_id,
            "website_id": self.website_id,
            "logged_in_at": to_json_compatible(self.logged_in_at) if self.logged_in_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CustomerSession':
        return cls(
            session_id=data["session_id"],
            account_id=data.get("account_id"),
            website_id=data.get("website_id"),
            logged_in_at=parse_utc_timestamp(data["logged_in_at"]) if data.get("logged_in_at") else None,
        )


@dataclass(frozen=True)
class CookieScope:
    """Path and domain the session cookie is issued for"""
    path: str = "/"
    domain: Optional[str] = None


class LoginStatus(Enum):
    """Social login flow outcome"""
    CONNECTED = "connected"
    NOT_CONNECTED = "not_connected"
    FAILED = "failed"


@dataclass
class LoginResult:
    """Result of a social login flow

    Exceptions raised by the provider integration propagate instead of
    producing a result; a handshake that reports failure yields FAILED.

    Attributes:
        status: Flow outcome (LoginStatus enum)
        account: Account logged in when connected
        redirect_url: Stored post-login destination, if any
        error: Failure cause when failed
    """
    status: LoginStatus
    account: Optional[LocalAccount] = None
    redirect_url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def not_connected(cls) -> 'LoginResult':
        return cls(status=LoginStatus.NOT_CONNECTED)

    @classmethod
    def failed(cls, error: str) -> 'LoginResult':
        return cls(status=LoginStatus.FAILED, error=error)

    @property
    def is_connected(self) -> bool:
        return self.status == LoginStatus.CONNECTED and self.account is not None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "redirectUrl": self.redirect_url,
            "account_id": self.account.account_id if self.account else None,
            "error": self.error,
        }


@dataclass
class CookieMetadata:
    """Attributes a cookie is written with"""
    duration: int
    path: str = "/"
    domain: Optional[str] = None
    secure: bool = False
    http_only: bool = True
    same_site: str = "lax"
