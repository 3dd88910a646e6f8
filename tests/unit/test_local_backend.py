"""Unit tests for LocalStorageBackend and the service running on top of it."""

import base64

import pytest

from filestore.application.dtos import ObjectDescriptor, UploadFile
from filestore.application.services import FileStorageService
from filestore.infrastructure.exceptions import StorageFetchError, StorageListError, StorageUploadError
from filestore.infrastructure.external.storage.local_backend import LocalStorageBackend


@pytest.fixture
def local(tmp_path) -> LocalStorageBackend:
    (tmp_path / "bucket").mkdir()
    return LocalStorageBackend(str(tmp_path), page_size=2)


def _upload(name: str, data: bytes) -> UploadFile:
    return UploadFile(file_name=name, body=base64.b64encode(data).decode("ascii"))


@pytest.mark.asyncio
async def test_put_then_get_round_trip(local, tmp_path) -> None:
    ack = await local.put_object("bucket", "dir/a.bin", b"\x00\x01payload")
    assert ack["ContentLength"] == 9
    assert (tmp_path / "bucket" / "dir" / "a.bin").read_bytes() == b"\x00\x01payload"
    chunks = [c async for c in local.get_object("bucket", "dir/a.bin")]
    assert b"".join(chunks) == b"\x00\x01payload"


@pytest.mark.asyncio
async def test_list_objects_paginates_in_key_order(local) -> None:
    for key in ("c", "a", "p/b", "p/d", "e"):
        await local.put_object("bucket", key, b"x")
    first = await local.list_objects("bucket")
    assert [c["Key"] for c in first["Contents"]] == ["a", "c"]
    assert first["IsTruncated"] is True
    second = await local.list_objects("bucket", "", first["NextContinuationToken"])
    assert [c["Key"] for c in second["Contents"]] == ["e", "p/b"]
    third = await local.list_objects("bucket", "", second["NextContinuationToken"])
    assert [c["Key"] for c in third["Contents"]] == ["p/d"]
    assert third["IsTruncated"] is False
    assert "NextContinuationToken" not in third


@pytest.mark.asyncio
async def test_list_objects_with_prefix(local) -> None:
    for key in ("p/1", "p/2", "q/3"):
        await local.put_object("bucket", key, b"x")
    page = await local.list_objects("bucket", "p/")
    assert [c["Key"] for c in page["Contents"]] == ["p/1", "p/2"]


@pytest.mark.asyncio
async def test_key_traversal_rejected(local) -> None:
    with pytest.raises(PermissionError):
        await local.put_object("bucket", "../escape", b"x")


@pytest.mark.asyncio
async def test_sign_returns_token_url(tmp_path) -> None:
    (tmp_path / "bucket").mkdir()
    local = LocalStorageBackend(str(tmp_path), base_url="https://files.example.test/")
    await local.put_object("bucket", "a.pdf", b"%PDF")
    url = await local.sign("bucket", "a.pdf", 60, "application/pdf")
    assert url.startswith("https://files.example.test/download/")
    assert url.endswith("?response-content-type=application%2Fpdf")
    token = url.split("/download/")[1].split("?")[0]
    assert local.validate_download_token(token) == ("bucket", "a.pdf")
    assert local.validate_download_token("unknown") is None


@pytest.mark.asyncio
async def test_service_pipeline_over_local_backend(local) -> None:
    svc = FileStorageService(local)
    await svc.upload_file("bucket", _upload("docs/a.txt", b"hi"))
    await svc.upload_file("bucket", _upload("docs/b.txt", b""))
    await svc.upload_file("bucket", _upload("docs/c.txt", b"yo"))
    await svc.upload_file("bucket", _upload("other/d.txt", b"no"))

    files = await svc.get_files("bucket", "docs/", concurrency_limit=2)
    assert [f.key for f in files] == ["docs/a.txt", "docs/c.txt"]
    assert [base64.b64decode(f.body) for f in files] == [b"hi", b"yo"]


@pytest.mark.asyncio
async def test_service_errors_over_local_backend(local) -> None:
    svc = FileStorageService(local)
    with pytest.raises(StorageListError):
        await svc.get_files("no-such-bucket")
    with pytest.raises(StorageUploadError) as exc_info:
        await svc.upload_file("no-such-bucket", _upload("a", b"x"))
    assert isinstance(exc_info.value.cause, FileNotFoundError)
    descriptors = await svc.enumerator.list_all("bucket")
    descriptors.append(ObjectDescriptor(key="missing.txt", bucket="bucket"))
    with pytest.raises(StorageFetchError) as fetch_info:
        await svc.fetcher.fetch_all(descriptors, "bucket", 5)
    assert fetch_info.value.details["key"] == "missing.txt"
