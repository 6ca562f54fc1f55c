"""Document store — verification documents in S3-compatible storage."""

from __future__ import annotations

import asyncio
import uuid
from typing import Optional

import boto3
import structlog
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from jurist.config import settings
from jurist.exceptions import DependencyFailure, ValidationError

logger = structlog.get_logger()

ALLOWED_MIME_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "application/pdf": "pdf",
}


class DocumentStore:
    """Validates and stores uploaded files; boto3 calls run in a thread pool."""

    def __init__(
        self,
        client,
        bucket: str,
        public_base_url: str,
        max_bytes: int = 20 * 1024 * 1024,
    ):
        self.s3 = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes

    def validate(self, data: bytes, mime_type: str) -> None:
        """Reject anything other than JPG/PNG/PDF up to max_bytes."""
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                "Invalid file type. Only JPG, PNG, and PDF are allowed.",
                field="mime_type",
                mime_type=mime_type,
            )
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"File size must be less than {self.max_bytes // (1024 * 1024)}MB",
                field="size",
                size=len(data),
            )

    async def store(self, data: bytes, mime_type: str, folder: str) -> str:
        """Upload a file and return its public URL.

        Args:
            data: File contents
            mime_type: Declared content type
            folder: Key prefix (photos, diplomas, licenses)

        Returns:
            Public URL of the stored object
        """
        self.validate(data, mime_type)

        key = f"{folder}/{uuid.uuid4()}.{ALLOWED_MIME_TYPES[mime_type]}"
        try:
            await asyncio.to_thread(
                self.s3.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=mime_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("document_upload_failed", key=key, error=str(e))
            raise DependencyFailure("Upload failed", {"folder": folder}) from e

        logger.info("document_stored", key=key, size=len(data), mime_type=mime_type)
        return f"{self.public_base_url}/{key}"

    def key_from_url(self, url: str) -> str:
        prefix = f"{self.public_base_url}/"
        return url[len(prefix):] if url.startswith(prefix) else url

    async def delete(self, url: str) -> None:
        key = self.key_from_url(url)
        try:
            await asyncio.to_thread(self.s3.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error("document_delete_failed", key=key, error=str(e))
            raise DependencyFailure("Delete failed", {"key": key}) from e

        logger.info("document_deleted", key=key)


_store: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """Get or create the singleton document store."""
    global _store
    if _store is None:
        client = boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url or None,
            region_name=settings.s3_region,
            aws_access_key_id=settings.s3_access_key_id or None,
            aws_secret_access_key=settings.s3_secret_access_key or None,
            config=Config(signature_version="s3v4"),
        )
        public_base_url = settings.s3_public_base_url or (
            f"{settings.s3_endpoint_url.rstrip('/')}/{settings.s3_bucket}"
            if settings.s3_endpoint_url
            else f"https://{settings.s3_bucket}.s3.{settings.s3_region}.amazonaws.com"
        )
        _store = DocumentStore(
            client,
            bucket=settings.s3_bucket,
            public_base_url=public_base_url,
            max_bytes=settings.document_max_bytes,
        )
    return _store
