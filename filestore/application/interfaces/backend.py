"""Storage backend protocol (DIP). Implementations: S3StorageBackend, LocalStorageBackend.

Backends raise the provider's own exceptions; the service layer wraps them.
"""

from collections.abc import AsyncIterator
from typing import Any, Protocol


class StorageBackendProtocol(Protocol):
    """Minimal capability set the service layer needs from a storage provider."""

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """Write one object. Returns the provider acknowledgement."""
        ...

    def get_object(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """Stream one object's content in chunks."""
        ...

    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        continuation_token: str | None = None,
    ) -> dict[str, Any]:
        """Return one listing page in ListObjectsV2 shape.

        Keys: Contents (list of {Key, Size, ETag}), IsTruncated,
        NextContinuationToken (present only when truncated).
        """
        ...

    async def sign(
        self,
        bucket: str,
        key: str,
        expiration_seconds: int,
        mime_type: str | None = None,
    ) -> str:
        """Return a time-limited GET URL for bucket/key."""
        ...
