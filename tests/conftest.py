"""Pytest configuration and fixtures for filestore.

FakeStorageBackend is an in-memory StorageBackendProtocol that records every
call so tests can assert on what reached the backend.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import pytest

from filestore.application.services import FileStorageService, RetryPolicy
from filestore.core.config import get_settings


class FakeStorageBackend:
    """In-memory backend with injectable failures."""

    def __init__(self, page_size: int = 1000) -> None:
        self.buckets: dict[str, dict[str, bytes]] = {}
        self.page_size = page_size
        self.get_errors: dict[str, Exception] = {}
        self.hang_keys: set[str] = set()
        self.list_error: Exception | None = None
        self.put_errors: list[Exception] = []
        self.sign_error: Exception | None = None
        self.get_calls: list[str] = []
        self.put_calls: list[tuple[str, str, bytes, str | None]] = []
        self.list_calls: list[tuple[str, str, str | None]] = []
        self.sign_calls: list[tuple[str, str, int, str | None]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, bucket: str, key: str, body: bytes) -> None:
        self.buckets.setdefault(bucket, {})[key] = body

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        self.put_calls.append((bucket, key, body, content_type))
        await asyncio.sleep(0)
        if self.put_errors:
            raise self.put_errors.pop(0)
        self.add(bucket, key, body)
        return {"ETag": '"fake"', "ResponseMetadata": {"HTTPStatusCode": 200}}

    async def get_object(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        self.get_calls.append(key)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if key in self.hang_keys:
                await asyncio.Event().wait()
            if key in self.get_errors:
                raise self.get_errors[key]
            body = self.buckets[bucket][key]
            # two chunks to exercise draining
            half = len(body) // 2
            for chunk in (body[:half], body[half:]):
                if chunk:
                    yield chunk
        finally:
            self.in_flight -= 1

    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        continuation_token: str | None = None,
    ) -> dict[str, Any]:
        self.list_calls.append((bucket, prefix, continuation_token))
        await asyncio.sleep(0)
        if self.list_error is not None:
            raise self.list_error
        keys = [k for k in self.buckets.get(bucket, {}) if k.startswith(prefix)]
        start = int(continuation_token) if continuation_token else 0
        page = keys[start : start + self.page_size]
        response: dict[str, Any] = {
            "IsTruncated": start + self.page_size < len(keys),
            "KeyCount": len(page),
        }
        if page:
            response["Contents"] = [
                {"Key": k, "Size": len(self.buckets[bucket][k])} for k in page
            ]
        if response["IsTruncated"]:
            response["NextContinuationToken"] = str(start + self.page_size)
        return response

    async def sign(
        self,
        bucket: str,
        key: str,
        expiration_seconds: int,
        mime_type: str | None = None,
    ) -> str:
        self.sign_calls.append((bucket, key, expiration_seconds, mime_type))
        if self.sign_error is not None:
            raise self.sign_error
        return f"https://{bucket}.example.test/{key}?X-Amz-Expires={expiration_seconds}"


@pytest.fixture
def backend() -> FakeStorageBackend:
    """Empty in-memory backend."""
    return FakeStorageBackend()


@pytest.fixture
def service(backend: FakeStorageBackend) -> FileStorageService:
    """Service over the fake backend with default policy and no timeout."""
    return FileStorageService(backend, retry_policy=RetryPolicy())


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Each test reads settings fresh from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
