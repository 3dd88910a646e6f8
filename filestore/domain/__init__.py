"""Domain layer: exceptions independent of the storage provider."""

from filestore.domain.exceptions import FilestoreException, ValidationException

__all__ = ["FilestoreException", "ValidationException"]
