"""Unit tests for ObjectEnumerator (pagination, failures)."""

import asyncio

import pytest

from filestore.application.services.enumerator import (
    ObjectEnumerator,
    descriptors_from_page,
)
from filestore.infrastructure.exceptions import StorageListError, StorageTimeoutError


@pytest.mark.asyncio
async def test_list_all_follows_continuation_tokens(backend) -> None:
    """Keys beyond the first page are not lost."""
    backend.page_size = 3
    for i in range(8):
        backend.add("b", f"k{i}", b"x")
    descriptors = await ObjectEnumerator(backend).list_all("b")
    assert [d.key for d in descriptors] == [f"k{i}" for i in range(8)]
    assert all(d.bucket == "b" for d in descriptors)
    assert [c[2] for c in backend.list_calls] == [None, "3", "6"]


@pytest.mark.asyncio
async def test_list_all_applies_prefix(backend) -> None:
    backend.add("b", "logs/a", b"1")
    backend.add("b", "logs/b", b"2")
    backend.add("b", "data/c", b"3")
    descriptors = await ObjectEnumerator(backend).list_all("b", "logs/")
    assert [d.key for d in descriptors] == ["logs/a", "logs/b"]
    assert backend.list_calls == [("b", "logs/", None)]


@pytest.mark.asyncio
async def test_list_all_empty_bucket_returns_empty_list(backend) -> None:
    assert await ObjectEnumerator(backend).list_all("empty") == []


@pytest.mark.asyncio
async def test_list_all_wraps_backend_error_without_retry(backend) -> None:
    cause = ConnectionError("network down")
    backend.list_error = cause
    with pytest.raises(StorageListError) as exc_info:
        await ObjectEnumerator(backend).list_all("b", "p/")
    exc = exc_info.value
    assert exc.error_code == "STORAGE_LIST_ERROR"
    assert exc.cause is cause
    assert exc.details["bucket"] == "b"
    assert exc.details["prefix"] == "p/"
    assert len(backend.list_calls) == 1


class _BrokenPager:
    """Backend whose pages claim truncation without a usable token."""

    def __init__(self, token: str | None) -> None:
        self.token = token
        self.calls = 0

    async def list_objects(self, bucket, prefix="", continuation_token=None):
        self.calls += 1
        page = {"IsTruncated": True, "Contents": [{"Key": f"k{self.calls}"}]}
        if self.token:
            page["NextContinuationToken"] = self.token
        return page


@pytest.mark.asyncio
async def test_list_all_rejects_truncated_page_without_token() -> None:
    with pytest.raises(StorageListError, match="Failed to list") as exc_info:
        await ObjectEnumerator(_BrokenPager(None)).list_all("b")
    assert "without continuation token" in exc_info.value.details["reason"]


@pytest.mark.asyncio
async def test_list_all_rejects_repeated_token() -> None:
    pager = _BrokenPager("same")
    with pytest.raises(StorageListError) as exc_info:
        await ObjectEnumerator(pager).list_all("b")
    assert "repeated" in exc_info.value.details["reason"]
    assert pager.calls == 2


@pytest.mark.asyncio
async def test_list_page_times_out() -> None:
    class _Hanging:
        async def list_objects(self, bucket, prefix="", continuation_token=None):
            await asyncio.Event().wait()

    with pytest.raises(StorageTimeoutError) as exc_info:
        await ObjectEnumerator(_Hanging(), timeout_seconds=0.01).list_all("b")
    assert exc_info.value.error_code == "STORAGE_TIMEOUT"
    assert exc_info.value.details["operation"] == "list"


def test_descriptors_from_page_skips_entries_without_key() -> None:
    page = {"Contents": [{"Key": "a", "Size": 2, "ETag": '"e"'}, {"Size": 1}, {"Key": ""}]}
    descriptors = descriptors_from_page("b", page)
    assert len(descriptors) == 1
    assert descriptors[0].key == "a"
    assert descriptors[0].size == 2
    assert descriptors[0].etag == '"e"'


def test_descriptors_from_page_without_contents() -> None:
    assert descriptors_from_page("b", {"IsTruncated": False}) == []
