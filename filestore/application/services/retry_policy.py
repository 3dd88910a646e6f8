"""Retry policy for object uploads.

Defaults reproduce the flat behaviour callers rely on: 3 immediate attempts,
every error retried. Backoff and a retryable-error predicate are opt-in.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from botocore.exceptions import (
    ClientError,
    NoCredentialsError,
    NoRegionError,
    ParamValidationError,
    PartialCredentialsError,
)

from filestore.core.constants import DEFAULT_UPLOAD_ATTEMPTS

if TYPE_CHECKING:
    from filestore.core.config import Settings

# S3 error codes that will not succeed on a retry.
TERMINAL_ERROR_CODES = frozenset({
    "AccessDenied",
    "AllAccessDisabled",
    "InvalidAccessKeyId",
    "InvalidBucketName",
    "InvalidToken",
    "ExpiredToken",
    "SignatureDoesNotMatch",
    "NoSuchBucket",
    "InvalidArgument",
    "InvalidRequest",
    "MethodNotAllowed",
    "EntityTooLarge",
})

_TERMINAL_EXCEPTIONS = (
    NoCredentialsError,
    PartialCredentialsError,
    NoRegionError,
    ParamValidationError,
)


def always_retry(error: BaseException) -> bool:
    """Retry predicate that treats every error as retryable."""
    return True


def is_transient_error(error: BaseException) -> bool:
    """False for credential, permission and malformed-request errors."""
    if isinstance(error, _TERMINAL_EXCEPTIONS):
        return False
    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code", "")
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        if code in TERMINAL_ERROR_CODES:
            return False
        # 4xx other than throttling/timeout is a caller problem.
        if status is not None and 400 <= status < 500 and status not in (408, 429):
            return False
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """Attempts, delay schedule and retryable-error predicate."""

    max_attempts: int = DEFAULT_UPLOAD_ATTEMPTS
    backoff_seconds: float = 0.0
    backoff_multiplier: float = 2.0
    retry_on: Callable[[BaseException], bool] = always_retry

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before attempt number `attempt` (1-based)."""
        if attempt <= 1 or self.backoff_seconds == 0:
            return 0.0
        return self.backoff_seconds * (self.backoff_multiplier ** (attempt - 2))

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """True when another attempt is allowed after `attempt` failed with `error`."""
        return attempt < self.max_attempts and self.retry_on(error)

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        """Build the upload policy from Settings."""
        return cls(
            max_attempts=settings.upload_max_attempts,
            backoff_seconds=settings.upload_backoff_seconds,
            backoff_multiplier=settings.upload_backoff_multiplier,
            retry_on=is_transient_error if settings.upload_retry_transient_only else always_retry,
        )
