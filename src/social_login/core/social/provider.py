"""Abstract identity provider handshake interface.

This module defines the contract the social login flow consumes from an
identity provider integration. The flow never talks to a provider directly;
it hands the provider configuration and callback URL to an Authenticator and
interprets the HandshakeResult it gets back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field

from social_login.domain.models import ProviderConfig

# Providers enabled out of the box; Settings.social_login_providers extends this
DEFAULT_PROVIDERS = ("facebook", "google", "windowslive")


class RawProfile(BaseModel):
    """User profile as returned by an identity provider.

    Any attribute may be missing; providers differ in what they share.

    Attributes:
        identifier: Provider-side user identifier
        first_name: Given name
        last_name: Family name
        email: Email address
        display_name: Full name for UI
        raw: Untouched provider payload
    """
    identifier: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class HandshakeStatus(Enum):
    """Handshake outcome"""
    CONNECTED = "connected"
    NOT_CONNECTED = "not_connected"
    FAILED = "failed"


@dataclass
class HandshakeResult:
    """Result of one Authenticator invocation.

    Attributes:
        status: Handshake outcome
        profile: Provider profile when connected
        error_message: Failure cause when failed
    """
    status: HandshakeStatus
    profile: Optional[RawProfile] = None
    error_message: Optional[str] = None

    @classmethod
    def connected(cls, profile: RawProfile) -> "HandshakeResult":
        return cls(status=HandshakeStatus.CONNECTED, profile=profile)

    @classmethod
    def not_connected(cls) -> "HandshakeResult":
        return cls(status=HandshakeStatus.NOT_CONNECTED)

    @classmethod
    def failed(cls, error_message: str) -> "HandshakeResult":
        return cls(status=HandshakeStatus.FAILED, error_message=error_message)

    @property
    def is_connected(self) -> bool:
        return self.status == HandshakeStatus.CONNECTED and self.profile is not None


class Authenticator(ABC):
    """Abstract interface for identity provider handshakes.

    The handshake spans several browser round trips (out to the provider's
    consent page and back to the callback URL). Implementations own that
    state machine; the flow invokes authenticate() once per request and
    treats it as a single awaited step.
    """

    @abstractmethod
    async def authenticate(
        self,
        provider: str,
        config: ProviderConfig,
        callback_url: str
    ) -> HandshakeResult:
        """Drive the provider handshake for the current request.

        Args:
            provider: Provider identifier (e.g. 'google')
            config: Enablement flag and API credentials for the provider
            callback_url: Absolute https URL the provider redirects back to

        Returns:
            HandshakeResult (connected with a profile, not connected, or failed)

        Raises:
            AuthorizationRedirect: If the browser has to visit the provider first
            ProviderConfigurationError: If the provider is disabled or unconfigured
            HandshakeError: If the exchange with the provider fails
        """
        pass
