"""S3-compatible storage for generated reports."""

from typing import Any, cast

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from contractsathi.config import Settings, get_settings
from contractsathi.shared.concurrency import storage_io
from contractsathi.shared.exceptions import StorageError
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)


class S3Storage:
    """S3-compatible object storage.

    Works with AWS S3 in production and MinIO for local development. boto3
    calls are blocking and run through ``storage_io``.
    """

    def __init__(self, settings: Settings | None = None, client: Any = None) -> None:
        settings = settings or get_settings()

        self.bucket = settings.s3_bucket
        self.public_base_url = settings.s3_public_base_url
        self.presigned_url_ttl = settings.s3_presigned_url_ttl
        self.client = client or boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint,
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
            config=Config(signature_version="s3v4"),
        )

    async def upload(self, key: str, content: bytes, content_type: str) -> str:
        """Upload an object and return its key.

        Raises:
            StorageError: If upload fails
        """
        try:
            await storage_io.run(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("s3_upload_failed", key=key, error=str(e))
            raise StorageError("Report upload failed", details={"key": key}) from e

        logger.info("file_uploaded", key=key, size=len(content))
        return key

    async def get_url(self, key: str) -> str:
        """Public URL when a public base URL is configured, else a presigned URL."""
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        return await self.get_presigned_url(key, expires_in=self.presigned_url_ttl)

    async def get_presigned_url(self, key: str, expires_in: int = 3600) -> str:
        """Generate a presigned download URL.

        Raises:
            StorageError: If URL generation fails
        """
        try:
            return cast(
                str,
                await storage_io.run(
                    self.client.generate_presigned_url,
                    "get_object",
                    Params={"Bucket": self.bucket, "Key": key},
                    ExpiresIn=expires_in,
                ),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("presigned_url_failed", key=key, error=str(e))
            raise StorageError("Report URL could not be created", details={"key": key}) from e

    async def bucket_reachable(self) -> bool:
        """Readiness probe: True when the bucket answers a HEAD request."""
        try:
            await storage_io.run(self.client.head_bucket, Bucket=self.bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning("s3_bucket_unreachable", bucket=self.bucket, error=str(e))
            return False
