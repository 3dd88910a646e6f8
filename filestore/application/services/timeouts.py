"""Per-call timeout for backend operations (asyncio.wait_for)."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from filestore.infrastructure.exceptions import StorageTimeoutError
from filestore.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def with_timeout(
    awaitable: Awaitable[T],
    timeout_seconds: float | None,
    operation: str,
    target: str,
) -> T:
    """Await with an optional timeout; raise StorageTimeoutError when it expires.

    Args:
        awaitable: Backend call to bound.
        timeout_seconds: Limit in seconds; None waits indefinitely.
        operation: Short operation name for the error (list, fetch, upload, sign).
        target: bucket or bucket/key, for the error message.
    """
    if timeout_seconds is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.warning(
            "Storage %s timed out after %s seconds: %s",
            operation,
            timeout_seconds,
            target,
        )
        raise StorageTimeoutError(operation, target, timeout_seconds) from e
