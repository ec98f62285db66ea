"""
S3 object store client used to host images attached to contact submissions.
"""

import asyncio
import logging
from typing import Any, Dict

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from contact_api.config.settings import Settings
from contact_api.core.errors import UploadError

logger = logging.getLogger(__name__)


def build_s3_client(settings: Settings) -> BaseClient:
    """Create an S3 client from the application settings."""
    kwargs: Dict[str, Any] = {"region_name": settings.AWS_REGION}
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
    return boto3.client("s3", **kwargs)


class S3ObjectStore:
    """
    Uploads byte buffers to a single S3 bucket and hands back their public URL.
    """

    def __init__(self, client: BaseClient, bucket: str, region: str):
        """
        Initialize the object store.

        Args:
            client: boto3 S3 client
            bucket: Target bucket name
            region: Bucket region, part of the public URL
        """
        self.client = client
        self.bucket = bucket
        self.region = region

    def public_url(self, key: str) -> str:
        """
        Build the public URL of an object.

        Args:
            key: Object key inside the bucket

        Returns:
            str: ``https://<bucket>.s3.<region>.amazonaws.com/<key>``
        """
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        """
        Upload an object and return its public URL.

        Existing objects under the same key are overwritten.

        Args:
            key: Object key inside the bucket
            data: Object content
            content_type: MIME type stored with the object

        Returns:
            str: Public URL of the uploaded object

        Raises:
            UploadError: If S3 rejects the request or cannot be reached
        """
        logger.info(f"Uploading {len(data)} bytes to s3://{self.bucket}/{key}")
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload of {key} failed: {e}")
            raise UploadError(str(e)) from e
        return self.public_url(key)
