"""Social login exceptions."""


class SocialLoginError(Exception):
    """Base class for social login failures."""
    pass


class UnsupportedProviderError(SocialLoginError, ValueError):
    """Provider is not in the configured provider set."""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported social login provider: {provider}")
        self.provider = provider


class HandshakeError(SocialLoginError):
    """The identity provider handshake failed."""

    def __init__(self, message: str, provider: str = None):
        super().__init__(message)
        self.provider = provider


class ProviderConfigurationError(HandshakeError):
    """Provider is disabled, lacks credentials or has no endpoint definition."""
    pass


class AuthorizationRedirect(SocialLoginError):
    """The browser must be sent to the provider to continue the handshake."""

    def __init__(self, url: str, provider: str = None):
        super().__init__(f"Redirect required: {url}")
        self.url = url
        self.provider = provider


class AccountReconciliationError(SocialLoginError):
    """Identity could not be mapped onto a local account."""
    pass


class AccountConflictError(AccountReconciliationError):
    """Another account already holds the (website, email) key."""

    def __init__(self, website_id: str, email: str):
        super().__init__(f"Account for '{email}' already exists in website {website_id}")
        self.website_id = website_id
        self.email = email


class MissingEmailError(AccountReconciliationError):
    """Provider profile carried no email to key the account on."""
    pass
