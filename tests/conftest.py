"""Shared fixtures: in-memory stand-ins for the AWS collaborators."""
from typing import Dict, List, Optional, Set, Tuple

import pytest

from phototag.core.exceptions import (
    AssociationStoreError,
    FaceCollectionError,
    IdentityStoreError,
    StorageError,
)
from phototag.domain.entities.photo import DetectedFace
from phototag.domain.interfaces.recognition.face_collection import FaceCollection
from phototag.domain.interfaces.storage.identity_store import AssociationStore, IdentityStore
from phototag.domain.interfaces.storage.object_metadata import ObjectMetadataStore
from phototag.domain.value_objects.recognition import FaceMatch, IdentityRecord
from phototag.services.photo_events import PhotoEventHandler
from phototag.services.reconciliation import PhotoReconciliationService
from phototag.services.uploader import UploaderResolver


class InMemoryFaceCollection(FaceCollection):
    """Face collections keyed by collection id.

    ``photo_faces`` decides which face ids indexing a photo produces and
    ``search_results`` which enrolled faces a searched face matches.
    """

    def __init__(self) -> None:
        self.collections: Dict[str, Set[str]] = {}
        self.photo_faces: Dict[str, List[str]] = {}
        self.search_results: Dict[str, List[Tuple[str, float]]] = {}
        self.search_errors: Dict[str, Exception] = {}
        self.index_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self.list_error: Optional[Exception] = None
        self.calls: List[Tuple] = []

    def enroll(self, collection_id: str, *face_ids: str) -> None:
        self.collections.setdefault(collection_id, set()).update(face_ids)

    async def index_faces(self, bucket: str, key: str, collection_id: str) -> List[DetectedFace]:
        self.calls.append(("index_faces", bucket, key, collection_id))
        if self.index_error:
            raise self.index_error
        face_ids = self.photo_faces.get(key, [])
        self.enroll(collection_id, *face_ids)
        return [DetectedFace(face_id=face_id, source_photo_key=key) for face_id in face_ids]

    async def search_face(
        self,
        collection_id: str,
        face_id: str,
        similarity_threshold: float,
        max_matches: int = 1,
    ) -> List[FaceMatch]:
        self.calls.append(("search_face", collection_id, face_id, similarity_threshold, max_matches))
        if face_id in self.search_errors:
            raise self.search_errors[face_id]
        matches = [
            FaceMatch(detected_face_id=face_id, matched_face_id=matched, similarity=similarity)
            for matched, similarity in self.search_results.get(face_id, [])
            if matched in self.collections.get(collection_id, set())
        ]
        return matches[:max_matches]

    async def delete_faces(self, collection_id: str, face_ids: List[str]) -> List[str]:
        self.calls.append(("delete_faces", collection_id, list(face_ids)))
        if self.delete_error:
            raise self.delete_error
        collection = self.collections.get(collection_id, set())
        deleted = [face_id for face_id in face_ids if face_id in collection]
        collection.difference_update(deleted)
        return deleted

    async def list_faces(self, collection_id: str) -> List[str]:
        self.calls.append(("list_faces", collection_id))
        if self.list_error:
            raise self.list_error
        return sorted(self.collections.get(collection_id, set()))

    def calls_named(self, name: str) -> List[Tuple]:
        return [call for call in self.calls if call[0] == name]


class InMemoryIdentityStore(IdentityStore):
    def __init__(self) -> None:
        self.identities: Dict[str, str] = {}
        self.errors: Dict[str, Exception] = {}
        self.lookups: List[str] = []

    async def get_identity(self, face_id: str) -> Optional[IdentityRecord]:
        self.lookups.append(face_id)
        if face_id in self.errors:
            raise self.errors[face_id]
        contact = self.identities.get(face_id)
        if contact is None:
            return None
        return IdentityRecord(face_id=face_id, contact_key=contact)


class InMemoryAssociationStore(AssociationStore):
    """Photo sets per contact key with add-to-set semantics."""

    def __init__(self) -> None:
        self.photos: Dict[str, Set[str]] = {}
        self.errors: Dict[str, Exception] = {}
        self.additions: List[Tuple[str, str]] = []

    async def add_photo(self, contact_key: str, photo_key: str) -> None:
        self.additions.append((contact_key, photo_key))
        if contact_key in self.errors:
            raise self.errors[contact_key]
        self.photos.setdefault(contact_key, set()).add(photo_key)

    async def get_photos(self, contact_key: str) -> Set[str]:
        return set(self.photos.get(contact_key, set()))


class InMemoryMetadataStore(ObjectMetadataStore):
    def __init__(self) -> None:
        self.metadata: Dict[Tuple[str, str], Dict[str, str]] = {}
        self.error: Optional[Exception] = None
        self.calls: List[Tuple[str, str]] = []

    async def get_object_metadata(self, bucket: str, key: str) -> Dict[str, str]:
        self.calls.append((bucket, key))
        if self.error:
            raise self.error
        return dict(self.metadata.get((bucket, key), {}))


@pytest.fixture
def face_collection() -> InMemoryFaceCollection:
    return InMemoryFaceCollection()


@pytest.fixture
def identity_store() -> InMemoryIdentityStore:
    return InMemoryIdentityStore()


@pytest.fixture
def association_store() -> InMemoryAssociationStore:
    return InMemoryAssociationStore()


@pytest.fixture
def metadata_store() -> InMemoryMetadataStore:
    return InMemoryMetadataStore()


@pytest.fixture
def reconciliation_service(face_collection, identity_store, association_store) -> PhotoReconciliationService:
    return PhotoReconciliationService(
        face_collection=face_collection,
        identity_store=identity_store,
        association_store=association_store,
        similarity_threshold=80.0,
        max_matches=1,
    )


@pytest.fixture
def photo_event_handler(metadata_store, reconciliation_service) -> PhotoEventHandler:
    return PhotoEventHandler(
        uploader_resolver=UploaderResolver(metadata_store=metadata_store, metadata_key="user"),
        reconciliation_service=reconciliation_service,
        process_first_record_only=False,
    )


@pytest.fixture
def errors():
    """Exception types raised by the real adapters, for failure injection."""
    return {
        "storage": StorageError,
        "collection": FaceCollectionError,
        "identity": IdentityStoreError,
        "association": AssociationStoreError,
    }


def s3_notification(*records: Tuple[str, str]) -> dict:
    """Build an S3 ObjectCreated notification for (bucket, key) pairs."""
    return {
        "Records": [
            {
                "eventSource": "aws:s3",
                "eventName": "ObjectCreated:Put",
                "s3": {"bucket": {"name": bucket}, "object": {"key": key}},
            }
            for bucket, key in records
        ]
    }


@pytest.fixture
def notification():
    return s3_notification
