"""Storage backend factory: creates S3 or local backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from filestore.application.interfaces.backend import StorageBackendProtocol

if TYPE_CHECKING:
    from filestore.core.config import Settings


class StorageFactory:
    """Factory for storage backends based on configuration."""

    @staticmethod
    def create_backend(settings: "Settings | None" = None) -> StorageBackendProtocol:
        """Create storage backend from settings.

        Args:
            settings: Settings; if None, uses get_settings().

        Returns:
            S3StorageBackend or LocalStorageBackend.

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from filestore.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend

        if backend == "local":
            from filestore.infrastructure.external.storage.local_backend import (
                LocalStorageBackend,
            )

            if not s.storage_root:
                raise ValueError("STORAGE_ROOT required for local backend")
            return LocalStorageBackend(
                storage_root=s.storage_root,
                base_url=s.storage_base_url,
            )
        if backend == "s3":
            from filestore.infrastructure.external.storage.s3_backend import (
                S3StorageBackend,
            )

            # Keys are used only when both are set; otherwise boto3 resolves its own.
            explicit = s.has_explicit_credentials
            return S3StorageBackend(
                region=s.resolved_region,
                endpoint_url=s.s3_endpoint_url,
                access_key=s.aws_access_key_id if explicit else None,
                secret_key=(
                    s.aws_secret_access_key.get_secret_value() if explicit else None
                ),
                session_token=(
                    s.aws_session_token.get_secret_value()
                    if explicit and s.aws_session_token
                    else None
                ),
            )
        raise ValueError(
            f"Unknown storage backend: {backend}. Supported: 'local', 's3'"
        )
