"""DTOs passed between the service layer and callers."""

from filestore.application.dtos.storage import (
    FetchFailure,
    FetchResult,
    ObjectDescriptor,
    RetrievedFile,
    SignedUrlRequest,
    UploadFile,
)

__all__ = [
    "FetchFailure",
    "FetchResult",
    "ObjectDescriptor",
    "RetrievedFile",
    "SignedUrlRequest",
    "UploadFile",
]
