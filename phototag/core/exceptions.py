"""Custom exceptions for the photo tagging service."""
from typing import Optional


class PhotoTaggingError(Exception):
    """Base exception for photo tagging operations."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize photo tagging error.

        Args:
            message: Error description
            details: Additional error context
        """
        super().__init__(message)
        self.details = details or {}


class StorageError(PhotoTaggingError):
    """Raised when object storage (S3) cannot be reached or answers with an error."""
    pass


class FaceCollectionError(PhotoTaggingError):
    """Raised when a face collection operation (index, search, delete, list) fails."""
    pass


class IdentityStoreError(PhotoTaggingError):
    """Raised when an enrolled identity cannot be read."""
    pass


class AssociationStoreError(PhotoTaggingError):
    """Raised when a photo cannot be associated with an identity."""
    pass


class InvalidEventError(PhotoTaggingError):
    """Raised when an upload notification payload is malformed."""
    pass


class ServiceNotInitializedError(PhotoTaggingError):
    """Raised when a service is requested before the container is initialized."""
    pass
