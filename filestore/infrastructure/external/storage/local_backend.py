"""Local filesystem backend: storage_root/<bucket>/<key>, for development and tests.

Listing is paginated like ListObjectsV2 (keys in lexicographic order, the
continuation token is the last key of the previous page). Signed URLs are
in-memory tokens resolved by validate_download_token.
"""

from __future__ import annotations

import hashlib
import os
import secrets
import tempfile
from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from urllib.parse import quote

import aiofiles
import aiofiles.os

from filestore.core.constants import MAX_LIST_PAGE_SIZE, STREAM_CHUNK_SIZE


class LocalStorageBackend:
    """Directory-tree implementation of StorageBackendProtocol.

    Paths are validated against storage_root. Writes use temp file + rename.
    Missing buckets/objects raise FileNotFoundError; traversal raises
    PermissionError.
    """

    CHUNK_SIZE = STREAM_CHUNK_SIZE

    def __init__(
        self,
        storage_root: str,
        base_url: str | None = None,
        page_size: int = MAX_LIST_PAGE_SIZE,
    ) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory; each subdirectory is a bucket.
            base_url: Base URL for download links (e.g. https://files.example.com).
            page_size: Max keys per listing page.
        """
        self.storage_root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        self.page_size = page_size
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)
        self._download_tokens: dict[str, tuple[str, str, datetime]] = {}

    def _bucket_path(self, bucket: str) -> Path:
        path = (self.storage_root / bucket).resolve()
        if path.parent != self.storage_root:
            raise PermissionError(f"Invalid bucket name: {bucket}")
        return path

    def _object_path(self, bucket: str, key: str) -> Path:
        """Resolve and validate path under the bucket directory."""
        bucket_path = self._bucket_path(bucket)
        full_path = (bucket_path / key).resolve()
        try:
            full_path.relative_to(bucket_path)
        except ValueError as e:
            raise PermissionError(f"Key escapes bucket: {key}") from e
        return full_path

    def _existing_bucket(self, bucket: str) -> Path:
        path = self._bucket_path(bucket)
        if not path.is_dir():
            raise FileNotFoundError(f"Bucket not found: {bucket}")
        return path

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """Atomic write (temp file + rename). Returns ETag and size."""
        self._existing_bucket(bucket)
        target_path = self._object_path(bucket, key)
        target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
        temp_fd, temp_path = tempfile.mkstemp(dir=target_path.parent, prefix=".tmp_")
        os.close(temp_fd)
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(body)
            os.replace(temp_path, target_path)
        finally:
            if Path(temp_path).exists():
                await aiofiles.os.remove(temp_path)
        return {
            "ETag": f'"{hashlib.md5(body).hexdigest()}"',
            "ContentLength": len(body),
            "ContentType": content_type,
        }

    async def get_object(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """Stream file content."""
        self._existing_bucket(bucket)
        file_path = self._object_path(bucket, key)
        if not file_path.is_file():
            raise FileNotFoundError(f"Object not found: {bucket}/{key}")
        async with aiofiles.open(file_path, "rb") as f:
            while True:
                chunk = await f.read(self.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    def _all_keys(self, bucket_path: Path) -> list[str]:
        keys = []
        for dirpath, _, filenames in os.walk(bucket_path):
            for name in filenames:
                if name.startswith(".tmp_"):
                    continue
                keys.append(Path(dirpath, name).relative_to(bucket_path).as_posix())
        return sorted(keys)

    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        continuation_token: str | None = None,
    ) -> dict[str, Any]:
        """One ListObjectsV2-shaped page of keys starting with prefix."""
        bucket_path = self._existing_bucket(bucket)
        keys = [k for k in self._all_keys(bucket_path) if k.startswith(prefix)]
        if continuation_token:
            keys = [k for k in keys if k > continuation_token]
        page, rest = keys[: self.page_size], keys[self.page_size :]
        contents = []
        for key in page:
            stat = (bucket_path / key).stat()
            contents.append({
                "Key": key,
                "Size": stat.st_size,
                "LastModified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            })
        response: dict[str, Any] = {
            "Name": bucket,
            "Prefix": prefix,
            "KeyCount": len(contents),
            "MaxKeys": self.page_size,
            "IsTruncated": bool(rest),
            "Contents": contents,
        }
        if continuation_token:
            response["ContinuationToken"] = continuation_token
        if rest:
            response["NextContinuationToken"] = page[-1]
        return response

    async def sign(
        self,
        bucket: str,
        key: str,
        expiration_seconds: int,
        mime_type: str | None = None,
    ) -> str:
        """Return a token download URL valid for expiration_seconds.

        Nothing in this package serves `/download/<token>`. The URL resolves
        only in this process, through validate_download_token, so a host
        application that wants to serve it must route the token there.
        """
        if not self._object_path(bucket, key).is_file():
            raise FileNotFoundError(f"Object not found: {bucket}/{key}")
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expiration_seconds)
        self._download_tokens[token] = (bucket, key, expires_at)
        self._cleanup_expired_tokens()
        path = f"/download/{token}"
        if mime_type:
            path = f"{path}?response-content-type={quote(mime_type, safe='')}"
        return f"{self.base_url}{path}" if self.base_url else path

    def _cleanup_expired_tokens(self) -> None:
        now = datetime.now(timezone.utc)
        for token in [t for t, (_, _, exp) in self._download_tokens.items() if exp <= now]:
            del self._download_tokens[token]

    def validate_download_token(self, token: str) -> tuple[str, str] | None:
        """Return (bucket, key) if token is valid and not expired."""
        if token not in self._download_tokens:
            return None
        bucket, key, expires_at = self._download_tokens[token]
        if datetime.now(timezone.utc) > expires_at:
            del self._download_tokens[token]
            return None
        return bucket, key
