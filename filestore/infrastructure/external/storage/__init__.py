"""Storage backends: S3-compatible (boto3) and local filesystem (aiofiles).

StorageFactory creates the configured backend. Implementations are loaded
lazily inside StorageFactory.create_backend() so the local backend does not
import boto3.

Implementations satisfy StorageBackendProtocol (put_object, get_object,
list_objects, sign).
"""

from filestore.infrastructure.external.storage.factory import StorageFactory

__all__ = ["StorageFactory"]
