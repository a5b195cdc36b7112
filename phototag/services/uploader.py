"""Resolves the user who uploaded a photo from its object metadata."""
from typing import Mapping, Optional

from phototag.core.config import settings
from phototag.core.logging import get_logger
from phototag.domain.interfaces.storage.object_metadata import ObjectMetadataStore

logger = get_logger(__name__)

USER_METADATA_PREFIX = "x-amz-meta-"


def metadata_value(metadata: Mapping[str, str], name: str) -> Optional[str]:
    """Read one user metadata field.

    S3 lower-cases user metadata names and some clients keep the ``x-amz-meta-``
    prefix, so both spellings are accepted and names compare case-insensitively.
    Empty values count as absent.
    """
    wanted = name.lower()
    if wanted.startswith(USER_METADATA_PREFIX):
        wanted = wanted[len(USER_METADATA_PREFIX):]

    for field, value in metadata.items():
        field_name = field.lower()
        if field_name.startswith(USER_METADATA_PREFIX):
            field_name = field_name[len(USER_METADATA_PREFIX):]
        if field_name == wanted:
            if value is None or not str(value).strip():
                return None
            return str(value).strip()
    return None


class UploaderResolver:
    """Looks up the uploading user of a stored photo."""

    def __init__(self, metadata_store: ObjectMetadataStore, metadata_key: Optional[str] = None) -> None:
        self.metadata_store = metadata_store
        self.metadata_key = metadata_key or settings.UPLOADER_METADATA_KEY

    async def resolve(self, bucket: str, key: str) -> Optional[str]:
        """Return the uploader of ``bucket/key``, or None when the metadata names nobody.

        Raises:
            StorageError: If the metadata cannot be fetched
        """
        metadata = await self.metadata_store.get_object_metadata(bucket, key)
        uploader = metadata_value(metadata, self.metadata_key)
        if uploader is None:
            logger.info("There was no uploader metadata",
                        bucket=bucket, key=key, metadata_key=self.metadata_key)
        return uploader
