"""Base64 helpers for object bodies."""

import base64
import binascii
from collections.abc import AsyncIterator

from filestore.domain.exceptions import ValidationException


async def stream_to_base64(chunks: AsyncIterator[bytes]) -> str:
    """Drain an async byte stream fully and return it as base64 text.

    The stream is closed even when draining is cancelled or fails.
    """
    buffer = bytearray()
    try:
        async for chunk in chunks:
            buffer.extend(chunk)
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()
    return base64.b64encode(bytes(buffer)).decode("ascii")


def decode_base64_body(body: str, field: str = "body") -> bytes:
    """Decode base64 text to bytes. Raises ValidationException if malformed."""
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationException(f"{field} is not valid base64: {e}", field) from e
