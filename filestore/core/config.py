"""Storage client configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Precedence: a Settings instance passed explicitly to
the factory, then environment / .env, then the default_region fallback.
"""

import logging
from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from filestore.core.constants import (
    DEFAULT_CONCURRENCY_LIMIT,
    DEFAULT_SIGNED_URL_EXPIRATION,
    DEFAULT_UPLOAD_ATTEMPTS,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    AWS_* variables use the names the AWS SDKs read, so an existing shell
    profile works unchanged. Explicit keys are only used when both the access
    key id and the secret are set; otherwise boto3 resolves credentials from
    its own chain (profiles, instance metadata, etc.).
    """

    # App
    app_name: str = "filestore"
    app_version: str = "1.0.0"
    debug: bool = False

    # Backend: "s3" (boto3) or "local" (directory tree, for development); case-insensitive
    storage_backend: str = "s3"
    storage_root: str = "./storage"
    storage_base_url: str | None = None

    # Credentials
    aws_access_key_id: str | None = None
    aws_secret_access_key: SecretStr | None = None
    aws_session_token: SecretStr | None = None
    aws_region: str | None = None
    default_region: str = "us-east-1"
    s3_endpoint_url: str | None = None  # MinIO / Spaces

    # Bulk retrieval
    fetch_concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT
    # Objects whose body encodes to empty text are dropped unless this is set.
    include_empty_objects: bool = False

    # Upload retry (defaults: 3 immediate attempts, every error retried)
    upload_max_attempts: int = DEFAULT_UPLOAD_ATTEMPTS
    upload_backoff_seconds: float = 0.0
    upload_backoff_multiplier: float = 2.0
    upload_retry_transient_only: bool = False

    # Per backend call; None disables.
    call_timeout_seconds: float | None = 60.0

    signed_url_default_expiration: int = DEFAULT_SIGNED_URL_EXPIRATION

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend_and_limits(self) -> "Settings":
        """Normalize the backend name and validate numeric limits."""
        self.storage_backend = self.storage_backend.strip().lower()
        if self.storage_backend not in ("s3", "local"):
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                "Must be one of: 'local', 's3'"
            )
        if self.fetch_concurrency_limit < 1:
            raise ValueError("fetch_concurrency_limit must be >= 1")
        if self.upload_max_attempts < 1:
            raise ValueError("upload_max_attempts must be >= 1")
        if self.upload_backoff_seconds < 0:
            raise ValueError("upload_backoff_seconds must be >= 0")
        if self.call_timeout_seconds is not None and self.call_timeout_seconds <= 0:
            raise ValueError("call_timeout_seconds must be > 0 (or unset to disable)")
        if self.signed_url_default_expiration < 1:
            raise ValueError("signed_url_default_expiration must be >= 1")
        return self

    @property
    def has_explicit_credentials(self) -> bool:
        """True when both access key id and secret are configured."""
        return bool(
            self.aws_access_key_id
            and self.aws_secret_access_key
            and self.aws_secret_access_key.get_secret_value()
        )

    @property
    def resolved_region(self) -> str:
        """AWS_REGION if set, otherwise default_region."""
        if self.aws_region:
            return self.aws_region
        logger.warning(
            "Region is not defined. Using by default %s", self.default_region
        )
        return self.default_region


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    In tests, call get_settings.cache_clear() after changing env vars so the
    next call picks up the new values.
    """
    return Settings()
