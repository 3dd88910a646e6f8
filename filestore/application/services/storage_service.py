"""File storage service: upload, bulk download, listing and signed URLs.

Entry point for callers. Wraps every backend failure at the operation
boundary into a StorageException subclass carrying the original cause.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from filestore.application.dtos.storage import (
    FetchResult,
    RetrievedFile,
    SignedUrlRequest,
    UploadFile,
)
from filestore.application.interfaces.backend import StorageBackendProtocol
from filestore.application.services.batched_fetcher import BatchedFetcher
from filestore.application.services.enumerator import ObjectEnumerator
from filestore.application.services.retry_policy import RetryPolicy
from filestore.application.services.timeouts import with_timeout
from filestore.core.constants import (
    DEFAULT_CONCURRENCY_LIMIT,
    DEFAULT_SIGNED_URL_EXPIRATION,
)
from filestore.infrastructure.exceptions import (
    StorageSignError,
    StorageTimeoutError,
    StorageUploadError,
)
from filestore.shared.telemetry.logging import get_logger
from filestore.shared.telemetry.tracing import add_span_attributes, traced
from filestore.shared.utils.encoding import decode_base64_body

if TYPE_CHECKING:
    from filestore.core.config import Settings

logger = get_logger(__name__)


class FileStorageService:
    """Facade over a storage backend.

    Only uploads are retried (per retry_policy). Listing, fetching and
    signing fail on the first error.
    """

    def __init__(
        self,
        backend: StorageBackendProtocol,
        retry_policy: RetryPolicy | None = None,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        include_empty_objects: bool = False,
        timeout_seconds: float | None = None,
        default_expiration: int = DEFAULT_SIGNED_URL_EXPIRATION,
    ) -> None:
        """Initialize the service.

        Args:
            backend: Storage backend (S3StorageBackend, LocalStorageBackend).
            retry_policy: Upload retry policy; defaults to 3 immediate attempts.
            concurrency_limit: Default batch size for get_files.
            include_empty_objects: Keep objects whose body is empty.
            timeout_seconds: Per backend call; None disables.
            default_expiration: Signed URL lifetime in seconds when a request
                gives none.
        """
        self.backend = backend
        self.retry_policy = retry_policy or RetryPolicy()
        self.concurrency_limit = concurrency_limit
        self.default_expiration = default_expiration
        self.timeout_seconds = timeout_seconds
        self.enumerator = ObjectEnumerator(backend, timeout_seconds=timeout_seconds)
        self.fetcher = BatchedFetcher(
            backend,
            timeout_seconds=timeout_seconds,
            include_empty_objects=include_empty_objects,
        )

    @classmethod
    def from_settings(cls, settings: "Settings | None" = None) -> FileStorageService:
        """Build service and backend from settings (get_settings() if None)."""
        from filestore.core.config import get_settings
        from filestore.infrastructure.external.storage.factory import StorageFactory

        s = settings or get_settings()
        return cls(
            backend=StorageFactory.create_backend(s),
            retry_policy=RetryPolicy.from_settings(s),
            concurrency_limit=s.fetch_concurrency_limit,
            include_empty_objects=s.include_empty_objects,
            timeout_seconds=s.call_timeout_seconds,
            default_expiration=s.signed_url_default_expiration,
        )

    @traced("filestore.upload_file")
    async def upload_file(self, bucket: str, file: UploadFile) -> dict[str, Any]:
        """Write one object, retrying per the retry policy.

        Raises:
            ValidationException: file.body is not valid base64.
            StorageUploadError: all attempts failed or a terminal error
                occurred; wraps the last cause.
        """
        body = decode_base64_body(file.body)
        policy = self.retry_policy
        attempt = 0
        while True:
            attempt += 1
            delay = policy.delay_before(attempt)
            if delay:
                await asyncio.sleep(delay)
            try:
                return await with_timeout(
                    self.backend.put_object(bucket, file.file_name, body, file.content_type),
                    self.timeout_seconds,
                    "upload",
                    f"{bucket}/{file.file_name}",
                )
            except Exception as e:
                if policy.should_retry(e, attempt):
                    logger.warning(
                        "Upload attempt %d/%d failed for %s/%s: %s. Attempts remaining: %d",
                        attempt,
                        policy.max_attempts,
                        bucket,
                        file.file_name,
                        e,
                        policy.max_attempts - attempt,
                    )
                    continue
                logger.error(
                    "Upload failed for %s/%s after %d attempt(s): %s",
                    bucket,
                    file.file_name,
                    attempt,
                    e,
                )
                raise StorageUploadError(bucket, file.file_name, str(e), attempt) from e

    @traced("filestore.get_files")
    async def get_files(
        self,
        bucket: str,
        prefix: str = "",
        concurrency_limit: int | None = None,
    ) -> list[RetrievedFile]:
        """Fetch every object under prefix as base64 text (fail-fast).

        Raises:
            StorageListError: listing failed.
            StorageFetchError: any object fetch failed; nothing is returned.
        """
        result = await self._fetch(bucket, prefix, concurrency_limit, fail_fast=True)
        return result.files

    @traced("filestore.collect_files")
    async def collect_files(
        self,
        bucket: str,
        prefix: str = "",
        concurrency_limit: int | None = None,
    ) -> FetchResult:
        """Fetch every object under prefix, reporting per-object failures instead of raising.

        Raises:
            StorageListError: listing failed (no objects to report on).
        """
        return await self._fetch(bucket, prefix, concurrency_limit, fail_fast=False)

    async def _fetch(
        self,
        bucket: str,
        prefix: str,
        concurrency_limit: int | None,
        fail_fast: bool,
    ) -> FetchResult:
        limit = self.concurrency_limit if concurrency_limit is None else concurrency_limit
        descriptors = await self.enumerator.list_all(bucket, prefix)
        result = await self.fetcher.fetch_all(
            descriptors, bucket, limit, fail_fast=fail_fast
        )
        add_span_attributes(
            objects_listed=len(descriptors),
            objects_fetched=len(result.files),
            fetch_failures=len(result.failures),
            batches=result.batch_count,
        )
        logger.info(
            "Fetched %d of %d object(s) from bucket=%s prefix=%r in %d batch(es)",
            len(result.files),
            len(descriptors),
            bucket,
            prefix,
            result.batch_count,
        )
        return result

    @traced("filestore.get_signed_url")
    async def get_signed_url(
        self,
        bucket: str,
        route: str,
        mime_type: str | None = None,
        expiration: int | None = None,
    ) -> str:
        """Return a GET URL for bucket/route valid for `expiration` seconds.

        When expiration is None the service default_expiration applies.
        """
        return await self.sign_url(
            SignedUrlRequest(
                bucket=bucket,
                route=route,
                mime_type=mime_type,
                expiration=expiration,
            )
        )

    @traced("filestore.sign_url")
    async def sign_url(self, request: SignedUrlRequest) -> str:
        """Presign a prepared request with a single backend call.

        A request without an expiration uses default_expiration.

        Raises:
            StorageSignError: signing failed.
        """
        expiration = request.expiration_seconds(self.default_expiration)
        try:
            return await with_timeout(
                self.backend.sign(
                    request.bucket,
                    request.route,
                    expiration,
                    request.mime_type,
                ),
                self.timeout_seconds,
                "sign",
                f"{request.bucket}/{request.route}",
            )
        except StorageTimeoutError:
            raise
        except Exception as e:
            logger.error(
                "Signing failed for %s/%s: %s", request.bucket, request.route, e
            )
            raise StorageSignError(request.bucket, request.route, str(e)) from e

    @traced("filestore.list_objects")
    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        continuation_token: str | None = None,
    ) -> dict[str, Any]:
        """Return one backend-native listing page (no pagination, no retry).

        Raises:
            StorageListError: listing failed.
        """
        return await self.enumerator.list_page(bucket, prefix, continuation_token)
