"""
DynamoDB identity and association stores using aioboto3.
"""
from typing import Optional, Set

from botocore.exceptions import BotoCoreError, ClientError

from phototag.core.config import settings
from phototag.core.exceptions import AssociationStoreError, IdentityStoreError
from phototag.core.logging import get_logger
from phototag.domain.interfaces.storage.identity_store import AssociationStore, IdentityStore
from phototag.domain.value_objects.recognition import IdentityRecord
from phototag.services.aws.base import AioBotoService, client_error_code

logger = get_logger(__name__)


class DynamoDBIdentityStore(AioBotoService, IdentityStore):
    """Reads enrolled identities from the faces table.

    The table is keyed by enrolled face id and holds the identity's contact key.
    It is populated by the enrollment process and only read here.
    """

    service_name = "dynamodb"
    error_class = IdentityStoreError

    def __init__(
        self,
        table_name: Optional[str] = None,
        key_name: Optional[str] = None,
        contact_attribute: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.table_name = table_name or settings.FACES_TABLE_NAME
        self.key_name = key_name or settings.FACES_TABLE_KEY
        self.contact_attribute = contact_attribute or settings.FACES_CONTACT_ATTRIBUTE

    async def get_identity(self, face_id: str) -> Optional[IdentityRecord]:
        try:
            async with self._get_client() as dynamodb:
                response = await dynamodb.get_item(
                    TableName=self.table_name,
                    Key={self.key_name: {"S": face_id}},
                )
        except ClientError as e:
            raise IdentityStoreError(
                f"Failed to read identity for face '{face_id}': {e}",
                details={"error_code": client_error_code(e), "table": self.table_name},
            ) from e
        except BotoCoreError as e:
            raise IdentityStoreError(f"Unexpected error reading identity for face '{face_id}': {e}") from e

        item = response.get("Item")
        if not item:
            return None
        contact = item.get(self.contact_attribute, {}).get("S")
        if not contact:
            logger.warning("Enrolled face has no contact key",
                           face_id=face_id, table=self.table_name,
                           attribute=self.contact_attribute)
            return None
        return IdentityRecord(face_id=face_id, contact_key=contact)


class DynamoDBAssociationStore(AioBotoService, AssociationStore):
    """Accumulates the photos each identity appears in.

    Photos are kept in a string set updated with ``ADD``, so concurrent updates for the
    same identity commute and replaying an update leaves the set unchanged.
    """

    service_name = "dynamodb"
    error_class = AssociationStoreError

    def __init__(
        self,
        table_name: Optional[str] = None,
        key_name: Optional[str] = None,
        set_attribute: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.table_name = table_name or settings.PHOTOS_TABLE_NAME
        self.key_name = key_name or settings.PHOTOS_TABLE_KEY
        self.set_attribute = set_attribute or settings.PHOTOS_SET_ATTRIBUTE

    async def add_photo(self, contact_key: str, photo_key: str) -> None:
        try:
            async with self._get_client() as dynamodb:
                await dynamodb.update_item(
                    TableName=self.table_name,
                    Key={self.key_name: {"S": contact_key}},
                    UpdateExpression="ADD #P :photokey",
                    ExpressionAttributeNames={"#P": self.set_attribute},
                    ExpressionAttributeValues={":photokey": {"SS": [photo_key]}},
                )
        except ClientError as e:
            raise AssociationStoreError(
                f"Failed to add photo '{photo_key}' for '{contact_key}': {e}",
                details={"error_code": client_error_code(e), "table": self.table_name},
            ) from e
        except BotoCoreError as e:
            raise AssociationStoreError(
                f"Unexpected error adding photo '{photo_key}' for '{contact_key}': {e}") from e

        logger.debug("Associated photo with identity",
                     contact_key=contact_key, photo_key=photo_key, table=self.table_name)

    async def get_photos(self, contact_key: str) -> Set[str]:
        try:
            async with self._get_client() as dynamodb:
                response = await dynamodb.get_item(
                    TableName=self.table_name,
                    Key={self.key_name: {"S": contact_key}},
                    ProjectionExpression="#P",
                    ExpressionAttributeNames={"#P": self.set_attribute},
                )
        except ClientError as e:
            raise AssociationStoreError(
                f"Failed to read photos for '{contact_key}': {e}",
                details={"error_code": client_error_code(e), "table": self.table_name},
            ) from e
        except BotoCoreError as e:
            raise AssociationStoreError(f"Unexpected error reading photos for '{contact_key}': {e}") from e

        item = response.get("Item") or {}
        return set(item.get(self.set_attribute, {}).get("SS", []))
