"""
S3 service for object metadata operations using aioboto3.
"""
from typing import Dict

from botocore.exceptions import BotoCoreError, ClientError

from phototag.core.exceptions import StorageError
from phototag.core.logging import get_logger
from phototag.domain.interfaces.storage.object_metadata import ObjectMetadataStore
from phototag.services.aws.base import AioBotoService, client_error_code

logger = get_logger(__name__)


class S3Service(AioBotoService, ObjectMetadataStore):
    """Service for reading object metadata from AWS S3 using aioboto3."""

    service_name = "s3"
    error_class = StorageError

    async def get_object_metadata(self, bucket: str, key: str) -> Dict[str, str]:
        """
        Get the user metadata of an object asynchronously.

        Args:
            bucket: S3 bucket name
            key: S3 object key

        Returns:
            User metadata of the object (``x-amz-meta-*`` headers, prefix stripped by S3)

        Raises:
            StorageError: If metadata cannot be retrieved (e.g., not found, access denied)
        """
        try:
            async with self._get_client() as s3:
                response = await s3.head_object(Bucket=bucket, Key=key)
            metadata = response.get("Metadata") or {}
            logger.debug("Fetched object metadata",
                         bucket=bucket, key=key, fields=sorted(metadata))
            return dict(metadata)
        except ClientError as e:
            error_code = client_error_code(e)
            if error_code in ("404", "NoSuchKey", "NotFound"):
                logger.warning("Object not found in S3", bucket=bucket, key=key)
                raise StorageError(f"Object not found: {bucket}/{key}") from e
            elif error_code in ("403", "AccessDenied", "Forbidden"):
                logger.error("Access denied reading object metadata. Check permissions.",
                             bucket=bucket, key=key)
                raise StorageError(f"Access denied for object: {bucket}/{key}") from e
            else:
                logger.error("Failed to read object metadata due to client error",
                             bucket=bucket, key=key, error=str(e), exc_info=True)
                raise StorageError(
                    f"Failed to read metadata of '{key}' due to S3 error: {e}") from e
        except BotoCoreError as e:
            logger.error("Unexpected error reading object metadata",
                         bucket=bucket, key=key, error=str(e), exc_info=True)
            raise StorageError(
                f"Unexpected error reading metadata of '{key}': {e}") from e
