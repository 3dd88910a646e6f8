"""Object enumeration: every key under a bucket/prefix across listing pages."""

from __future__ import annotations

from typing import Any

from filestore.application.dtos.storage import ObjectDescriptor
from filestore.application.interfaces.backend import StorageBackendProtocol
from filestore.application.services.timeouts import with_timeout
from filestore.infrastructure.exceptions import StorageListError, StorageTimeoutError
from filestore.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def descriptors_from_page(bucket: str, page: dict[str, Any]) -> list[ObjectDescriptor]:
    """Build descriptors from one ListObjectsV2 page. Entries without a Key are skipped."""
    descriptors = []
    for entry in page.get("Contents") or []:
        key = entry.get("Key")
        if not key:
            continue
        descriptors.append(
            ObjectDescriptor(
                key=key,
                bucket=bucket,
                size=entry.get("Size"),
                etag=entry.get("ETag"),
            )
        )
    return descriptors


class ObjectEnumerator:
    """Lists all objects under a prefix, following continuation tokens.

    No retries: the first failing page aborts the listing with StorageListError.
    """

    def __init__(
        self,
        backend: StorageBackendProtocol,
        timeout_seconds: float | None = None,
    ) -> None:
        self.backend = backend
        self.timeout_seconds = timeout_seconds

    async def list_page(
        self,
        bucket: str,
        prefix: str = "",
        continuation_token: str | None = None,
    ) -> dict[str, Any]:
        """Fetch one raw listing page. Raises StorageListError on backend failure."""
        try:
            return await with_timeout(
                self.backend.list_objects(bucket, prefix, continuation_token),
                self.timeout_seconds,
                "list",
                bucket,
            )
        except StorageTimeoutError:
            raise
        except Exception as e:
            logger.error(
                "Listing failed for bucket=%s prefix=%r: %s", bucket, prefix, e
            )
            raise StorageListError(bucket, prefix, str(e)) from e

    async def list_all(self, bucket: str, prefix: str = "") -> list[ObjectDescriptor]:
        """Return descriptors for every object under prefix, in backend order."""
        descriptors: list[ObjectDescriptor] = []
        seen_tokens: set[str] = set()
        token: str | None = None
        pages = 0
        while True:
            page = await self.list_page(bucket, prefix, token)
            pages += 1
            descriptors.extend(descriptors_from_page(bucket, page))
            if not page.get("IsTruncated"):
                break
            token = page.get("NextContinuationToken")
            if not token:
                raise StorageListError(
                    bucket, prefix, "truncated listing page without continuation token"
                )
            if token in seen_tokens:
                raise StorageListError(
                    bucket, prefix, f"continuation token repeated: {token}"
                )
            seen_tokens.add(token)
        logger.debug(
            "Listed %d object(s) in %d page(s) for bucket=%s prefix=%r",
            len(descriptors),
            pages,
            bucket,
            prefix,
        )
        return descriptors
