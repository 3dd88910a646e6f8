"""Shared literal values for the storage client."""

DEFAULT_CONCURRENCY_LIMIT = 25
DEFAULT_SIGNED_URL_EXPIRATION = 3600  # seconds
DEFAULT_UPLOAD_ATTEMPTS = 3

# Bytes per read when draining an object body stream.
STREAM_CHUNK_SIZE = 64 * 1024

# Largest page the S3 ListObjectsV2 API returns.
MAX_LIST_PAGE_SIZE = 1000
