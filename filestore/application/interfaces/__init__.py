"""Interfaces (ports) implemented by infrastructure."""

from filestore.application.interfaces.backend import StorageBackendProtocol

__all__ = ["StorageBackendProtocol"]
