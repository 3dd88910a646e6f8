"""filestore: async client facade over S3-compatible object storage.

Upload with retry, bulk download with bounded concurrency, raw listing and
presigned URLs. Start with FileStorageService.from_settings().
"""

from filestore.application.dtos import (
    FetchFailure,
    FetchResult,
    ObjectDescriptor,
    RetrievedFile,
    SignedUrlRequest,
    UploadFile,
)
from filestore.application.services import (
    BatchedFetcher,
    FileStorageService,
    ObjectEnumerator,
    RetryPolicy,
)
from filestore.core.config import Settings, get_settings
from filestore.domain.exceptions import FilestoreException, ValidationException
from filestore.infrastructure.exceptions import (
    StorageException,
    StorageFetchError,
    StorageListError,
    StorageSignError,
    StorageTimeoutError,
    StorageUploadError,
)

__all__ = [
    "BatchedFetcher",
    "FetchFailure",
    "FetchResult",
    "FileStorageService",
    "FilestoreException",
    "ObjectDescriptor",
    "ObjectEnumerator",
    "RetrievedFile",
    "RetryPolicy",
    "Settings",
    "SignedUrlRequest",
    "StorageException",
    "StorageFetchError",
    "StorageListError",
    "StorageSignError",
    "StorageTimeoutError",
    "StorageUploadError",
    "UploadFile",
    "ValidationException",
    "get_settings",
]
