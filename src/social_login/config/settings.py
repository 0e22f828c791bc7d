"""Configuration Settings for Social Login Service

Manages environment variables and application configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Service info
    service_name: str = "social-login-service"
    service_version: str = "1.0.0"
    environment: str = "development"

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Redis configuration
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components"""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Public URLs (callback URLs are always built on the secure base)
    base_url: str = "http://localhost:8000"
    secure_base_url: Optional[str] = None

    # Session cookie
    session_secret: str = "dev-session-secret-change-in-production"
    session_cookie_name: str = "social_login_session"
    session_cookie_path: str = "/"
    session_cookie_domain: Optional[str] = None
    session_ttl_seconds: int = 3600

    # Tenant scope used when the request does not name one
    store_code: str = "default"
    website_id: str = "1"

    # Social login
    social_login_providers: list[str] = ["facebook", "google", "windowslive"]
    social_login_endpoints: dict[str, dict] = {}  # overrides/additions to built-in OAuth endpoints
    config_backend: str = "redis"  # redis or static
    social_login_config: dict[str, dict[str, str]] = {}  # {"default": {"social_login/google/enabled": "1"}}
    handshake_ttl_seconds: int = 600
    http_timeout_seconds: float = 10.0

    # Where the browser lands after the flow
    account_redirect_path: str = "/customer/account"
    login_failure_path: str = "/customer/account/login"

    # CORS configuration
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance

    Returns:
        Settings instance
    """
    return Settings()
