"""Shared utilities: base64 encoding of object bodies."""

from filestore.shared.utils.encoding import decode_base64_body, stream_to_base64

__all__ = ["decode_base64_body", "stream_to_base64"]
