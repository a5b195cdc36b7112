"""Object metadata interface."""
from abc import ABC, abstractmethod
from typing import Dict


class ObjectMetadataStore(ABC):
    """Interface for reading user metadata attached to stored objects."""

    @abstractmethod
    async def get_object_metadata(self, bucket: str, key: str) -> Dict[str, str]:
        """
        Fetch the user metadata of an object.

        Args:
            bucket: Bucket holding the object
            key: Object key

        Returns:
            Mapping of metadata names to values

        Raises:
            StorageError: If the metadata cannot be retrieved
        """
        pass
