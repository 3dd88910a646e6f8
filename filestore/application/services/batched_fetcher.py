"""Batched object fetch: bounded fan-out per batch, batches run one after another.

Each batch starts one task per descriptor and waits for all of them before
the next batch begins, so at most `concurrency_limit` object streams are open
against the backend at any time. Results keep descriptor order, which also
means every entry of batch N precedes every entry of batch N+1.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TypeVar

from filestore.application.dtos.storage import (
    FetchFailure,
    FetchResult,
    ObjectDescriptor,
    RetrievedFile,
)
from filestore.application.interfaces.backend import StorageBackendProtocol
from filestore.application.services.timeouts import with_timeout
from filestore.domain.exceptions import ValidationException
from filestore.infrastructure.exceptions import StorageFetchError, StorageTimeoutError
from filestore.shared.telemetry.logging import get_logger
from filestore.shared.telemetry.tracing import add_span_event
from filestore.shared.utils.encoding import stream_to_base64

logger = get_logger(__name__)

T = TypeVar("T")


def partition(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into contiguous batches of at most `size` (ceil(len/size) batches)."""
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ValidationException(
            f"concurrency_limit must be a positive integer, got {size!r}",
            "concurrency_limit",
        )
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchedFetcher:
    """Fetches object bodies in sequential batches of concurrent downloads."""

    def __init__(
        self,
        backend: StorageBackendProtocol,
        timeout_seconds: float | None = None,
        include_empty_objects: bool = False,
    ) -> None:
        self.backend = backend
        self.timeout_seconds = timeout_seconds
        self.include_empty_objects = include_empty_objects

    async def fetch_one(self, bucket: str, descriptor: ObjectDescriptor) -> RetrievedFile | None:
        """Download and base64-encode one object. None when dropped as empty."""
        body = await with_timeout(
            stream_to_base64(self.backend.get_object(bucket, descriptor.key)),
            self.timeout_seconds,
            "fetch",
            f"{bucket}/{descriptor.key}",
        )
        if body == "" and not self.include_empty_objects:
            logger.debug("Dropping empty object %s/%s", bucket, descriptor.key)
            return None
        return RetrievedFile(key=descriptor.key, body=body)

    async def _run_batch(
        self,
        bucket: str,
        batch: list[ObjectDescriptor],
        fail_fast: bool,
    ) -> list[tuple[ObjectDescriptor, RetrievedFile | None, BaseException | None]]:
        """Run one batch; returns (descriptor, file, error) in descriptor order.

        In fail-fast mode the first error cancels the tasks still running.
        """
        tasks = [asyncio.create_task(self.fetch_one(bucket, d)) for d in batch]
        try:
            if fail_fast:
                _, pending = await asyncio.wait(
                    tasks, return_when=asyncio.FIRST_EXCEPTION
                )
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)
            else:
                await asyncio.wait(tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        outcomes = []
        for descriptor, task in zip(batch, tasks):
            if task.cancelled():
                continue
            error = task.exception()
            outcomes.append((descriptor, None if error else task.result(), error))
        return outcomes

    async def fetch_all(
        self,
        descriptors: Sequence[ObjectDescriptor],
        bucket: str,
        concurrency_limit: int,
        fail_fast: bool = True,
    ) -> FetchResult:
        """Fetch every descriptor's body, `concurrency_limit` at a time.

        Args:
            descriptors: Objects to fetch (usually from ObjectEnumerator.list_all).
            bucket: Bucket holding the objects.
            concurrency_limit: Batch size; must be >= 1.
            fail_fast: When True the first failing fetch aborts the whole run
                and nothing is returned. When False every batch runs and
                failures are reported next to the fetched files.

        Raises:
            ValidationException: concurrency_limit is not a positive integer.
            StorageFetchError: fail_fast and a fetch failed (wraps the first
                failing cause in descriptor order).
            StorageTimeoutError: fail_fast and a fetch timed out.
        """
        batches = partition(descriptors, concurrency_limit)
        files: list[RetrievedFile] = []
        failures: list[FetchFailure] = []
        for index, batch in enumerate(batches, start=1):
            logger.debug(
                "Fetching batch %d/%d (%d object(s)) from bucket=%s",
                index,
                len(batches),
                len(batch),
                bucket,
            )
            for descriptor, retrieved, error in await self._run_batch(bucket, batch, fail_fast):
                if error is not None:
                    if fail_fast:
                        logger.error(
                            "Fetch failed for %s/%s in batch %d: %s",
                            bucket,
                            descriptor.key,
                            index,
                            error,
                        )
                        if isinstance(error, StorageTimeoutError):
                            raise error
                        raise StorageFetchError(bucket, descriptor.key, str(error)) from error
                    logger.warning(
                        "Fetch failed for %s/%s: %s", bucket, descriptor.key, error
                    )
                    failures.append(FetchFailure(key=descriptor.key, error=error))
                elif retrieved is not None:
                    files.append(retrieved)
            add_span_event(
                "batch_completed",
                batch=index,
                size=len(batch),
                files_total=len(files),
                failures_total=len(failures),
            )
        return FetchResult(files=files, failures=failures, batch_count=len(batches))
