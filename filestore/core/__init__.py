"""Core: config and constants."""

from filestore.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
