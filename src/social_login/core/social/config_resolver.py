"""Provider configuration lookup."""

import logging

from social_login.config.scope_config import ScopeConfig
from social_login.domain.models import ProviderConfig, StoreContext

logger = logging.getLogger(__name__)

CONFIG_PATH_ENABLED = "social_login/{}/enabled"
CONFIG_PATH_API_KEY = "social_login/{}/api_key"
CONFIG_PATH_API_SECRET = "social_login/{}/api_secret"

_TRUTHY = {"1", "true", "yes", "on"}


class ProviderConfigResolver:
    """Resolves a provider name to its enablement flag and credentials.

    Values are read from scoped configuration on every call. A disabled or
    unconfigured provider is not an error here; the Authenticator decides
    whether it can proceed.
    """

    def __init__(self, scope_config: ScopeConfig, store: StoreContext):
        self.scope_config = scope_config
        self.store = store

    async def resolve(self, provider: str) -> ProviderConfig:
        enabled = await self.scope_config.get_value(CONFIG_PATH_ENABLED.format(provider), self.store)
        key = await self.scope_config.get_value(CONFIG_PATH_API_KEY.format(provider), self.store)
        secret = await self.scope_config.get_value(CONFIG_PATH_API_SECRET.format(provider), self.store)

        config = ProviderConfig(
            enabled=_is_enabled(enabled),
            key=key or "",
            secret=secret or "",
        )
        logger.debug(
            f"Resolved {provider} config for store {self.store.store_code}: "
            f"enabled={config.enabled}, credentials={config.has_credentials}"
        )
        return config


def _is_enabled(value) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY
