"""S3-compatible object storage backend (AWS S3, MinIO, etc.).

Uses boto3 (sync) via asyncio.to_thread for the async API. Provider
exceptions (ClientError, BotoCoreError) propagate unchanged; the service
layer wraps them.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import boto3
from botocore.config import Config

from filestore.core.constants import STREAM_CHUNK_SIZE


class S3StorageBackend:
    """boto3-backed implementation of StorageBackendProtocol.

    The client is built once per backend; credentials fall back to boto3's
    own resolution chain when access_key/secret_key are not both given.
    """

    CHUNK_SIZE = STREAM_CHUNK_SIZE

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        session_token: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            session_token: Optional, for temporary credentials.
            client: Prebuilt boto3 S3 client (overrides all other arguments).
        """
        self.region = region
        self.endpoint_url = endpoint_url
        if client is not None:
            self._client = client
            return
        kwargs: dict[str, Any] = {"region_name": region}
        addressing_style = "auto"
        if endpoint_url is not None:
            kwargs["endpoint_url"] = endpoint_url
            # MinIO and most self-hosted stores need path-style addressing.
            addressing_style = "path"
        kwargs["config"] = Config(
            signature_version="s3v4",
            s3={"addressing_style": addressing_style},
        )
        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
            if session_token:
                kwargs["aws_session_token"] = session_token
        self._client = boto3.client("s3", **kwargs)

    @property
    def client(self) -> Any:
        return self._client

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """PutObject; returns the boto3 response."""
        params: dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        return await asyncio.to_thread(lambda: self._client.put_object(**params))

    async def get_object(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """GetObject and stream the body in CHUNK_SIZE reads."""
        resp = await asyncio.to_thread(
            lambda: self._client.get_object(Bucket=bucket, Key=key)
        )
        stream = resp["Body"]
        try:
            while True:
                chunk = await asyncio.to_thread(stream.read, self.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            stream.close()

    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        continuation_token: str | None = None,
    ) -> dict[str, Any]:
        """ListObjectsV2, one page."""
        params: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        return await asyncio.to_thread(lambda: self._client.list_objects_v2(**params))

    async def sign(
        self,
        bucket: str,
        key: str,
        expiration_seconds: int,
        mime_type: str | None = None,
    ) -> str:
        """Presigned GET URL; mime_type sets ResponseContentType."""
        params: dict[str, Any] = {"Bucket": bucket, "Key": key}
        if mime_type:
            params["ResponseContentType"] = mime_type
        return await asyncio.to_thread(
            lambda: self._client.generate_presigned_url(
                "get_object",
                Params=params,
                ExpiresIn=expiration_seconds,
            )
        )
