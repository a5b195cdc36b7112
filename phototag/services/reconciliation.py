"""Reconciles the faces found in a photo with the identities enrolled by its uploader."""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List, Optional

from phototag.core.config import settings
from phototag.core.exceptions import FaceCollectionError
from phototag.core.logging import get_logger
from phototag.domain.entities.photo import DetectedFace, PhotoEvent
from phototag.domain.interfaces.recognition.face_collection import FaceCollection
from phototag.domain.interfaces.storage.identity_store import AssociationStore, IdentityStore
from phototag.domain.value_objects.recognition import (
    FaceMatch,
    FaceResolution,
    ReconciliationReport,
    ResolutionStatus,
)

logger = get_logger(__name__)


def select_match(matches: List[FaceMatch], similarity_threshold: float) -> Optional[FaceMatch]:
    """Pick the first match, in provider order, at or above the threshold."""
    return next((match for match in matches if match.similarity >= similarity_threshold), None)


class PhotoReconciliationService:
    """Service linking the faces in an uploaded photo to enrolled identities.

    For one photo this service:
    1. Indexes the photo's faces into the uploader's collection
    2. Searches each indexed face against the same collection
    3. Looks up the identity owning the best match
    4. Adds the photo to that identity's photo set
    5. Deletes every face it indexed, whatever happened in steps 2-4

    Failures in steps 2-4 only drop the contribution of the face they belong to.
    Failures to index or to delete abort the photo and propagate.

    Example:
        ```python
        service = PhotoReconciliationService(
            face_collection=RekognitionFaceCollection(),
            identity_store=DynamoDBIdentityStore(),
            association_store=DynamoDBAssociationStore(),
        )
        report = await service.reconcile(PhotoEvent(bucket="photos", key="p1.jpg"), "alice")
        ```
    """

    def __init__(
        self,
        face_collection: FaceCollection,
        identity_store: IdentityStore,
        association_store: AssociationStore,
        similarity_threshold: Optional[float] = None,
        max_matches: Optional[int] = None,
    ) -> None:
        """Initialize the reconciliation service.

        Args:
            face_collection: Per-user face collections used for indexing and search
            identity_store: Store mapping enrolled faces to identities
            association_store: Store accumulating the photos of each identity
            similarity_threshold: Minimum similarity (0-100, inclusive); defaults to settings
            max_matches: Matches requested per search; defaults to settings
        """
        self.face_collection = face_collection
        self.identity_store = identity_store
        self.association_store = association_store
        self.similarity_threshold = (
            settings.SIMILARITY_THRESHOLD if similarity_threshold is None else similarity_threshold
        )
        self.max_matches = max_matches or settings.MAX_MATCHES
        self._uploader_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _uploader_lock(self, uploader: str) -> AsyncGenerator[None, None]:
        """Serialize runs against the same collection within this process."""
        lock = self._uploader_locks.setdefault(uploader, asyncio.Lock())
        self._lock_users[uploader] = self._lock_users.get(uploader, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[uploader] -= 1
            if not self._lock_users[uploader]:
                del self._lock_users[uploader]
                del self._uploader_locks[uploader]

    async def _log_collection(self, collection_id: str, stage: str) -> None:
        try:
            face_ids = await self.face_collection.list_faces(collection_id)
        except FaceCollectionError as e:
            logger.warning("Could not list collection faces",
                           collection_id=collection_id, stage=stage, error=str(e))
            return
        logger.info("Collection faces",
                    collection_id=collection_id, stage=stage,
                    faces_count=len(face_ids), face_ids=face_ids)

    @asynccontextmanager
    async def indexed_faces(
        self,
        event: PhotoEvent,
        collection_id: str,
    ) -> AsyncGenerator[List[DetectedFace], None]:
        """Index the photo's faces and delete them again when the block exits.

        The delete covers exactly the faces indexed here and runs on every exit path.
        No delete request is made when nothing was indexed.

        Raises:
            FaceCollectionError: If indexing or deleting fails
        """
        await self._log_collection(collection_id, "before indexing")
        faces = await self.face_collection.index_faces(event.bucket, event.key, collection_id)
        logger.info("Detected faces",
                    collection_id=collection_id, key=event.key, faces_count=len(faces))
        try:
            await self._log_collection(collection_id, "after indexing")
            yield faces
        finally:
            await self._delete_faces(collection_id, faces)

    async def _delete_faces(self, collection_id: str, faces: List[DetectedFace]) -> None:
        face_ids = [face.face_id for face in faces]
        if not face_ids:
            logger.debug("No indexed faces to delete", collection_id=collection_id)
            return

        deleted = await self.face_collection.delete_faces(collection_id, face_ids)
        residual = sorted(set(face_ids) - set(deleted))
        if residual:
            logger.warning("Collection still holds indexed faces after cleanup",
                           collection_id=collection_id, face_ids=residual)
        else:
            logger.info("Deleted indexed faces",
                        collection_id=collection_id, faces_count=len(face_ids))

    async def resolve_face(self, face: DetectedFace, collection_id: str) -> FaceResolution:
        """Resolve one indexed face to an enrolled identity.

        Never raises: search and lookup failures come back as a failed resolution.
        """
        log = logger.bind(collection_id=collection_id, face_id=face.face_id)
        try:
            matches = await self.face_collection.search_face(
                collection_id,
                face.face_id,
                similarity_threshold=self.similarity_threshold,
                max_matches=self.max_matches,
            )
        except Exception as e:
            log.warning("Face search failed", error=str(e), error_type=type(e).__name__)
            return FaceResolution.failed(face.face_id, str(e))

        log.debug("Searched face", matches_count=len(matches))
        match = select_match(matches, self.similarity_threshold)
        if match is None:
            return FaceResolution.no_match(face.face_id)

        try:
            identity = await self.identity_store.get_identity(match.matched_face_id)
        except Exception as e:
            log.warning("Identity lookup failed",
                        matched_face_id=match.matched_face_id,
                        error=str(e), error_type=type(e).__name__)
            return FaceResolution.failed(face.face_id, str(e), match=match)

        if identity is None:
            log.info("Matched face has no enrolled identity",
                     matched_face_id=match.matched_face_id, similarity=match.similarity)
            return FaceResolution.no_match(face.face_id, match=match)

        log.info("Matched faces",
                 matched_face_id=match.matched_face_id,
                 similarity=match.similarity,
                 contact_key=identity.contact_key)
        return FaceResolution.matched(match, identity)

    async def record_resolutions(
        self,
        event: PhotoEvent,
        collection_id: str,
        detected: int,
        resolutions: List[FaceResolution],
    ) -> ReconciliationReport:
        """Write the associations of matched faces and fold all results into a report."""
        matched = recorded = failed = 0
        contact_keys: List[str] = []

        for resolution in resolutions:
            if resolution.status == ResolutionStatus.FAILED:
                failed += 1
                continue
            if resolution.status == ResolutionStatus.NO_MATCH:
                continue

            matched += 1
            contact_key = resolution.identity.contact_key
            try:
                await self.association_store.add_photo(contact_key, event.key)
            except Exception as e:
                logger.warning("Failed to associate photo with identity",
                               contact_key=contact_key, key=event.key,
                               face_id=resolution.face_id, error=str(e))
                failed += 1
                continue

            recorded += 1
            if contact_key not in contact_keys:
                contact_keys.append(contact_key)

        return ReconciliationReport(
            photo_key=event.key,
            collection_id=collection_id,
            detected=detected,
            matched=matched,
            recorded=recorded,
            failed=failed,
            contact_keys=contact_keys,
        )

    async def reconcile(self, event: PhotoEvent, uploader: str) -> ReconciliationReport:
        """Run the full index, resolve, record and cleanup cycle for one photo.

        Args:
            event: The uploaded photo
            uploader: Uploading user; names the collection to match against

        Returns:
            Counts of detected, matched, recorded and failed faces

        Raises:
            FaceCollectionError: If indexing or deleting the photo's faces fails
        """
        collection_id = uploader
        async with self._uploader_lock(uploader):
            async with self.indexed_faces(event, collection_id) as faces:
                resolutions = [await self.resolve_face(face, collection_id) for face in faces]
                report = await self.record_resolutions(event, collection_id, len(faces), resolutions)

        logger.info(
            f"Found a match for {report.matched} out of {report.detected} detected faces",
            collection_id=collection_id,
            key=event.key,
            recorded=report.recorded,
            failed=report.failed,
        )
        return report
