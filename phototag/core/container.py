"""Service container for dependency injection."""
from typing import Optional

from phototag.core.config import DEFAULT_MIN_CONFIDENCE, settings
from phototag.core.exceptions import ServiceNotInitializedError
from phototag.core.logging import get_logger
from phototag.domain.interfaces.recognition.face_collection import FaceCollection
from phototag.domain.interfaces.storage.identity_store import AssociationStore, IdentityStore
from phototag.domain.interfaces.storage.object_metadata import ObjectMetadataStore
from phototag.services.aws.dynamodb import DynamoDBAssociationStore, DynamoDBIdentityStore
from phototag.services.aws.rekognition import RekognitionFaceCollection
from phototag.services.aws.s3 import S3Service
from phototag.services.aws.sqs import SQSService
from phototag.services.photo_events import PhotoEventHandler
from phototag.services.reconciliation import PhotoReconciliationService
from phototag.services.uploader import UploaderResolver

logger = get_logger(__name__)


class ServiceContainer:
    """Container for application services.

    This container manages the lifecycle and dependencies of all services in the application.
    It ensures proper initialization order and provides a single source of truth for service instances.

    Example:
        ```python
        container = ServiceContainer()
        await container.initialize()

        handler = container.photo_event_handler
        batch = await handler.handle_batch(notification)
        ```
    """

    def __init__(self) -> None:
        """Initialize empty container."""
        # Core services - Use interface type hints
        self.metadata_store: Optional[ObjectMetadataStore] = None
        self.face_collection: Optional[FaceCollection] = None
        self.identity_store: Optional[IdentityStore] = None
        self.association_store: Optional[AssociationStore] = None
        self.sqs_service: Optional[SQSService] = None

        # Domain services (depend on interfaces)
        self.uploader_resolver: Optional[UploaderResolver] = None
        self.reconciliation_service: Optional[PhotoReconciliationService] = None
        self.photo_event_handler: Optional[PhotoEventHandler] = None

    @property
    def initialized(self) -> bool:
        return self.photo_event_handler is not None

    async def initialize(self, with_queue: bool = False) -> None:
        """Initialize all services in the correct order.

        Args:
            with_queue: Also connect to the upload notification queue
        """
        if settings.MIN_CONFIDENCE == DEFAULT_MIN_CONFIDENCE:
            logger.info(f"Using default minimum confidence of {settings.MIN_CONFIDENCE}")
        else:
            logger.info(f"Setting minimum confidence to {settings.MIN_CONFIDENCE}")
        logger.info("Face match settings",
                    similarity_threshold=settings.SIMILARITY_THRESHOLD,
                    max_matches=settings.MAX_MATCHES,
                    process_first_record_only=settings.PROCESS_FIRST_RECORD_ONLY)

        self.metadata_store = S3Service()
        self.face_collection = RekognitionFaceCollection()
        self.identity_store = DynamoDBIdentityStore()
        self.association_store = DynamoDBAssociationStore()

        if with_queue:
            self.sqs_service = SQSService()
            await self.sqs_service.initialize()

        self.uploader_resolver = UploaderResolver(metadata_store=self.metadata_store)
        self.reconciliation_service = PhotoReconciliationService(
            face_collection=self.face_collection,
            identity_store=self.identity_store,
            association_store=self.association_store,
        )
        self.photo_event_handler = PhotoEventHandler(
            uploader_resolver=self.uploader_resolver,
            reconciliation_service=self.reconciliation_service,
        )

    def get_photo_event_handler(self) -> PhotoEventHandler:
        if self.photo_event_handler is None:
            raise ServiceNotInitializedError("Photo event handler not initialized")
        return self.photo_event_handler

    async def cleanup(self) -> None:
        """Cleanup all services in reverse order of initialization."""
        self.photo_event_handler = None
        self.reconciliation_service = None
        self.uploader_resolver = None

        if self.sqs_service:
            await self.sqs_service.cleanup()
            self.sqs_service = None

        # aioboto3 clients are opened and closed per call
        self.association_store = None
        self.identity_store = None
        self.face_collection = None
        self.metadata_store = None


# Global container instance
container = ServiceContainer()
