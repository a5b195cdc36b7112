"""Face collection interface."""
from abc import ABC, abstractmethod
from typing import List

from ...entities.photo import DetectedFace
from ...value_objects.recognition import FaceMatch


class FaceCollection(ABC):
    """Interface for per-user face collections held by a face recognition provider."""

    @abstractmethod
    async def index_faces(
        self,
        bucket: str,
        key: str,
        collection_id: str,
    ) -> List[DetectedFace]:
        """
        Index every face found in a stored image into a collection.

        Args:
            bucket: Bucket holding the image
            key: Object key of the image
            collection_id: Collection the faces are added to

        Returns:
            The faces added to the collection, one per detection

        Raises:
            FaceCollectionError: If indexing fails
        """
        pass

    @abstractmethod
    async def search_face(
        self,
        collection_id: str,
        face_id: str,
        similarity_threshold: float,
        max_matches: int = 1,
    ) -> List[FaceMatch]:
        """
        Search a face already in the collection for other faces in the same collection.

        Args:
            collection_id: Collection to search
            face_id: Face identifier to search with
            similarity_threshold: Minimum similarity score (0-100)
            max_matches: Maximum number of matches to return

        Returns:
            Matches in the order the provider ranks them

        Raises:
            FaceCollectionError: If the search fails
        """
        pass

    @abstractmethod
    async def delete_faces(
        self,
        collection_id: str,
        face_ids: List[str],
    ) -> List[str]:
        """
        Delete faces from a collection.

        Args:
            collection_id: Collection to delete from
            face_ids: Face identifiers to delete; an empty list is a no-op

        Returns:
            Face identifiers the provider reports as deleted

        Raises:
            FaceCollectionError: If deletion fails
        """
        pass

    @abstractmethod
    async def list_faces(self, collection_id: str) -> List[str]:
        """
        List every face identifier currently held by a collection.

        Raises:
            FaceCollectionError: If listing fails
        """
        pass
