"""Identity and association store interfaces."""
from abc import ABC, abstractmethod
from typing import Optional, Set

from ...value_objects.recognition import IdentityRecord


class IdentityStore(ABC):
    """Interface for looking up the identity enrolled for a face."""

    @abstractmethod
    async def get_identity(self, face_id: str) -> Optional[IdentityRecord]:
        """
        Look up the identity owning an enrolled face.

        Args:
            face_id: Enrolled face identifier

        Returns:
            The identity record, or None when the face is not enrolled

        Raises:
            IdentityStoreError: If the lookup fails
        """
        pass


class AssociationStore(ABC):
    """Interface for recording which photos an identity appears in."""

    @abstractmethod
    async def add_photo(self, contact_key: str, photo_key: str) -> None:
        """
        Add a photo to an identity's photo set.

        The update must be an atomic add-to-set: concurrent additions for the same
        identity never overwrite each other and repeating an addition is a no-op.

        Raises:
            AssociationStoreError: If the update fails
        """
        pass

    @abstractmethod
    async def get_photos(self, contact_key: str) -> Set[str]:
        """
        Return every photo associated with an identity.

        Raises:
            AssociationStoreError: If the read fails
        """
        pass
