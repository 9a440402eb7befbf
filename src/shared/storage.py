import asyncio
import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_s3.client import S3Client

from src.shared.interfaces import ObjectStore
from src.shared.settings import Settings

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ('404', 'NoSuchKey', 'NotFound')


class StorageError(Exception):
    """Raised when storage operations fail."""
    def __init__(self, message: str, key: str, original_error: Exception | None = None):
        super().__init__(message)
        self.key = key
        self.original_error = original_error


class ObjectNotFound(StorageError):
    """Raised when the requested key does not exist."""


class S3ObjectStore(ObjectStore):
    """S3-based implementation of ObjectStore."""

    def __init__(self, settings: Settings, s3_client: Optional[S3Client] = None):
        self.settings = settings
        self.s3_client = s3_client or self._create_s3_client(settings)
        self.bucket = settings.bucket_name

    def _create_s3_client(self, settings: Settings) -> S3Client:
        client_kwargs: dict[str, Any] = {
            'config': settings.boto_config,
            'region_name': settings.aws_region,
        }

        # Only add credentials if they're provided (for local development)
        if settings.aws_access_key_id and settings.aws_secret_access_key:
            client_kwargs['aws_access_key_id'] = settings.aws_access_key_id
            client_kwargs['aws_secret_access_key'] = settings.aws_secret_access_key

        return boto3.client('s3', **client_kwargs)

    async def get_bytes(self, key: str) -> bytes:
        """Download bytes from S3 using asyncio executor."""
        loop = asyncio.get_event_loop()

        def _sync_download() -> bytes:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=key)
            return response['Body'].read()

        logger.debug(f'Starting to fetch {key}')
        content = await self._call(key, loop.run_in_executor(None, _sync_download))
        logger.debug(f'Fetched {key} ({len(content)} bytes)')
        return content

    async def exists(self, key: str) -> bool:
        """Probe for an object with a HEAD request."""
        loop = asyncio.get_event_loop()

        def _sync_head() -> None:
            self.s3_client.head_object(Bucket=self.bucket, Key=key)

        try:
            await self._call(key, loop.run_in_executor(None, _sync_head))
        except ObjectNotFound:
            return False

        return True

    async def put_bytes(self, key: str, content: bytes, extra_args: dict[str, Any]) -> None:
        """Upload bytes to S3 using asyncio executor."""
        loop = asyncio.get_event_loop()

        def _sync_upload():
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                **extra_args
            )

        await self._call(key, loop.run_in_executor(None, _sync_upload))
        logger.debug(f'Uploaded {len(content)} bytes to s3://{self.bucket}/{key}')

    async def _call(self, key: str, operation: Any) -> Any:
        """Await a storage call and translate botocore failures into StorageError."""
        try:
            return await operation
        except ClientError as e:
            code = str(e.response.get('Error', {}).get('Code', ''))
            if code in NOT_FOUND_CODES:
                raise ObjectNotFound(f'Key {key} not found in bucket {self.bucket}', key, e)
            raise StorageError(f'S3 request for {key} failed: {e}', key, e)
        except BotoCoreError as e:
            raise StorageError(f'S3 request for {key} failed: {e}', key, e)


def get_store(settings: Settings) -> ObjectStore | None:
    """Build a store for this invocation, or None when uploads are disabled."""
    if not settings.uploads_enabled:
        logger.info('No AWS_S3_BUCKET configured, artifacts will be written locally')
        return None

    logger.info(f'Using S3 storage with bucket {settings.bucket_name}')
    return S3ObjectStore(settings)
