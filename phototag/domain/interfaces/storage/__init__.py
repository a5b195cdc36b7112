"""Storage interfaces."""
from .identity_store import AssociationStore, IdentityStore
from .object_metadata import ObjectMetadataStore

__all__ = ["AssociationStore", "IdentityStore", "ObjectMetadataStore"]
