"""Infrastructure exceptions for storage operations.

Every public storage operation wraps provider failures in one of these
(``raise ... from e``) so callers get a stable code plus the original cause.
"""

from typing import Any

from filestore.domain.exceptions import FilestoreException


class StorageException(FilestoreException):
    """Base exception for storage operations."""

    @property
    def cause(self) -> BaseException | None:
        """Original provider/transport exception, if any."""
        return self.__cause__

    def as_dict(self) -> dict[str, Any]:
        """Uniform error envelope for logging or API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class StorageListError(StorageException):
    """Listing objects under a bucket/prefix failed."""

    def __init__(self, bucket: str, prefix: str, reason: str) -> None:
        super().__init__(
            f"Failed to list objects in bucket: {bucket}",
            "STORAGE_LIST_ERROR",
            {"bucket": bucket, "prefix": prefix, "reason": reason},
        )


class StorageFetchError(StorageException):
    """Fetching an object body failed during a batched fetch."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to fetch object: {key}",
            "STORAGE_FETCH_ERROR",
            {"bucket": bucket, "key": key, "reason": reason},
        )


class StorageUploadError(StorageException):
    """Object upload failed after the retry budget was spent."""

    def __init__(self, bucket: str, key: str, reason: str, attempts: int) -> None:
        super().__init__(
            f"Failed to upload file: {key}",
            "STORAGE_UPLOAD_ERROR",
            {"bucket": bucket, "key": key, "reason": reason, "attempts": attempts},
        )


class StorageSignError(StorageException):
    """Presigned URL generation failed."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to sign URL for: {key}",
            "STORAGE_SIGN_ERROR",
            {"bucket": bucket, "key": key, "reason": reason},
        )


class StorageTimeoutError(StorageException):
    """A backend call did not complete within the configured timeout."""

    def __init__(self, operation: str, target: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Storage {operation} timed out after {timeout_seconds} seconds: {target}",
            "STORAGE_TIMEOUT",
            {
                "operation": operation,
                "target": target,
                "timeout_seconds": timeout_seconds,
            },
        )
