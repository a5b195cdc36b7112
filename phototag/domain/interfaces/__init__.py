"""Service interfaces package."""
from .recognition import FaceCollection
from .storage import AssociationStore, IdentityStore, ObjectMetadataStore

__all__ = ["AssociationStore", "FaceCollection", "IdentityStore", "ObjectMetadataStore"]
