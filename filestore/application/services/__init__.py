"""Application services: enumeration, batched fetch, upload retry, facade."""

from filestore.application.services.batched_fetcher import BatchedFetcher, partition
from filestore.application.services.enumerator import ObjectEnumerator
from filestore.application.services.retry_policy import (
    RetryPolicy,
    always_retry,
    is_transient_error,
)
from filestore.application.services.storage_service import FileStorageService

__all__ = [
    "BatchedFetcher",
    "FileStorageService",
    "ObjectEnumerator",
    "RetryPolicy",
    "always_retry",
    "is_transient_error",
    "partition",
]
