"""
Rekognition face collection adapter using aioboto3.
"""
from typing import List

from botocore.exceptions import BotoCoreError, ClientError

from phototag.core.exceptions import FaceCollectionError
from phototag.core.logging import get_logger
from phototag.domain.entities.photo import DetectedFace
from phototag.domain.interfaces.recognition.face_collection import FaceCollection
from phototag.domain.value_objects.recognition import FaceMatch
from phototag.services.aws.base import AioBotoService, client_error_code

logger = get_logger(__name__)


class RekognitionFaceCollection(AioBotoService, FaceCollection):
    """Per-user face collections backed by Amazon Rekognition.

    Collection ids are the uploader identities; faces are indexed straight from S3
    so the image bytes never pass through this process.

    Example:
        ```python
        collection = RekognitionFaceCollection()
        faces = await collection.index_faces("photos", "trip/p1.jpg", "alice")
        matches = await collection.search_face("alice", faces[0].face_id, 80.0)
        await collection.delete_faces("alice", [face.face_id for face in faces])
        ```
    """

    service_name = "rekognition"
    error_class = FaceCollectionError

    async def index_faces(self, bucket: str, key: str, collection_id: str) -> List[DetectedFace]:
        try:
            async with self._get_client() as rekognition:
                response = await rekognition.index_faces(
                    CollectionId=collection_id,
                    Image={"S3Object": {"Bucket": bucket, "Name": key}},
                )
        except ClientError as e:
            logger.error("Failed to index faces",
                         collection_id=collection_id, bucket=bucket, key=key,
                         error_code=client_error_code(e), error=str(e))
            raise FaceCollectionError(
                f"Failed to index faces of '{key}' into '{collection_id}': {e}",
                details={"error_code": client_error_code(e)},
            ) from e
        except BotoCoreError as e:
            logger.error("Unexpected error indexing faces",
                         collection_id=collection_id, key=key, error=str(e), exc_info=True)
            raise FaceCollectionError(f"Unexpected error indexing faces of '{key}': {e}") from e

        return [
            DetectedFace(face_id=record["Face"]["FaceId"], source_photo_key=key)
            for record in response.get("FaceRecords", [])
        ]

    async def search_face(
        self,
        collection_id: str,
        face_id: str,
        similarity_threshold: float,
        max_matches: int = 1,
    ) -> List[FaceMatch]:
        try:
            async with self._get_client() as rekognition:
                response = await rekognition.search_faces(
                    CollectionId=collection_id,
                    FaceId=face_id,
                    FaceMatchThreshold=similarity_threshold,
                    MaxFaces=max_matches,
                )
        except ClientError as e:
            raise FaceCollectionError(
                f"Failed to search face '{face_id}' in '{collection_id}': {e}",
                details={"error_code": client_error_code(e)},
            ) from e
        except BotoCoreError as e:
            raise FaceCollectionError(f"Unexpected error searching face '{face_id}': {e}") from e

        return [
            FaceMatch(
                detected_face_id=face_id,
                matched_face_id=match["Face"]["FaceId"],
                similarity=match["Similarity"],
            )
            for match in response.get("FaceMatches", [])
        ]

    async def delete_faces(self, collection_id: str, face_ids: List[str]) -> List[str]:
        if not face_ids:
            return []

        try:
            async with self._get_client() as rekognition:
                response = await rekognition.delete_faces(
                    CollectionId=collection_id,
                    FaceIds=list(face_ids),
                )
        except ClientError as e:
            logger.error("Failed to delete faces",
                         collection_id=collection_id, face_ids=face_ids,
                         error_code=client_error_code(e), error=str(e))
            raise FaceCollectionError(
                f"Failed to delete {len(face_ids)} faces from '{collection_id}': {e}",
                details={"error_code": client_error_code(e), "face_ids": list(face_ids)},
            ) from e
        except BotoCoreError as e:
            logger.error("Unexpected error deleting faces",
                         collection_id=collection_id, error=str(e), exc_info=True)
            raise FaceCollectionError(
                f"Unexpected error deleting faces from '{collection_id}': {e}",
                details={"face_ids": list(face_ids)},
            ) from e

        return list(response.get("DeletedFaces", []))

    async def list_faces(self, collection_id: str) -> List[str]:
        face_ids = []
        try:
            async with self._get_client() as rekognition:
                paginator = rekognition.get_paginator("list_faces")
                async for page in paginator.paginate(CollectionId=collection_id):
                    face_ids.extend(face["FaceId"] for face in page.get("Faces", []))
        except ClientError as e:
            raise FaceCollectionError(
                f"Failed to list faces of '{collection_id}': {e}",
                details={"error_code": client_error_code(e)},
            ) from e
        except BotoCoreError as e:
            raise FaceCollectionError(f"Unexpected error listing faces of '{collection_id}': {e}") from e
        return face_ids
