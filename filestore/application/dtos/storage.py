"""DTOs for storage operations (no dependency on the provider SDK)."""

from dataclasses import dataclass, field

from filestore.core.constants import DEFAULT_SIGNED_URL_EXPIRATION


@dataclass(frozen=True)
class ObjectDescriptor:
    """One stored object as reported by a listing page."""

    key: str
    bucket: str
    size: int | None = None
    etag: str | None = None


@dataclass(frozen=True)
class RetrievedFile:
    """Fetched object; body is the full content as base64 text."""

    key: str
    body: str


@dataclass(frozen=True)
class UploadFile:
    """Upload input; body is base64 text, file_name becomes the object key."""

    file_name: str
    body: str
    content_type: str | None = None


@dataclass(frozen=True)
class SignedUrlRequest:
    """Input for presigning a GET on bucket/route."""

    bucket: str
    route: str
    mime_type: str | None = None
    expiration: int | None = None

    def expiration_seconds(self, default: int = DEFAULT_SIGNED_URL_EXPIRATION) -> int:
        """Explicit expiration, or `default` (3600 unless given) when unset."""
        if self.expiration is None:
            return default
        return self.expiration


@dataclass(frozen=True)
class FetchFailure:
    """A per-object fetch that failed (partial-result mode)."""

    key: str
    error: BaseException


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a batched fetch run."""

    files: list[RetrievedFile] = field(default_factory=list)
    failures: list[FetchFailure] = field(default_factory=list)
    batch_count: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def keys(self) -> list[str]:
        return [f.key for f in self.files]
