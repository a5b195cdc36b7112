"""Handles photo upload notifications end to end."""
from typing import Any, Dict, Optional

from phototag.core.config import settings
from phototag.core.logging import get_logger
from phototag.domain.entities.photo import PhotoEvent
from phototag.domain.value_objects.events import BatchReport, EventOutcome, EventStatus
from phototag.services.event_filter import is_supported_image, parse_photo_events
from phototag.services.reconciliation import PhotoReconciliationService
from phototag.services.uploader import UploaderResolver

logger = get_logger(__name__)


class PhotoEventHandler:
    """Filters upload events, resolves their uploader and reconciles their faces.

    Unsupported images and photos without uploader metadata are logged and skipped.
    Metadata, indexing and cleanup failures propagate to the caller, which owns the
    retry policy.
    """

    def __init__(
        self,
        uploader_resolver: UploaderResolver,
        reconciliation_service: PhotoReconciliationService,
        process_first_record_only: Optional[bool] = None,
    ) -> None:
        self.uploader_resolver = uploader_resolver
        self.reconciliation_service = reconciliation_service
        self.process_first_record_only = (
            settings.PROCESS_FIRST_RECORD_ONLY
            if process_first_record_only is None
            else process_first_record_only
        )

    async def handle_event(self, event: PhotoEvent) -> EventOutcome:
        if not is_supported_image(event.key):
            logger.info(f"Object {event.bucket}:{event.key} is not a supported image type")
            return EventOutcome(event=event, status=EventStatus.SKIPPED_UNSUPPORTED)

        logger.info("Processing image", bucket=event.bucket, key=event.key)
        uploader = await self.uploader_resolver.resolve(event.bucket, event.key)
        if uploader is None:
            return EventOutcome(event=event, status=EventStatus.SKIPPED_NO_UPLOADER)

        report = await self.reconciliation_service.reconcile(event, uploader)
        return EventOutcome(
            event=event,
            status=EventStatus.PROCESSED,
            uploader=uploader,
            report=report,
        )

    async def handle_batch(self, payload: Dict[str, Any]) -> BatchReport:
        """Handle every upload event of one notification, in order.

        With ``process_first_record_only`` the batch stops after the first record
        with a supported image type, whether or not it had an uploader.

        Raises:
            InvalidEventError: If the notification is malformed
        """
        events = parse_photo_events(payload)
        batch = BatchReport()
        for position, event in enumerate(events):
            outcome = await self.handle_event(event)
            batch.outcomes.append(outcome)
            if self.process_first_record_only and outcome.status != EventStatus.SKIPPED_UNSUPPORTED:
                remaining = len(events) - position - 1
                if remaining:
                    logger.warning("Stopping after first supported record",
                                   skipped_records=remaining)
                break

        logger.info("Handled upload notification",
                    records=len(events), processed=batch.processed)
        return batch
