"""Shared utilities and telemetry. No storage logic."""

from filestore.shared.utils import decode_base64_body, stream_to_base64

__all__ = ["decode_base64_body", "stream_to_base64"]
