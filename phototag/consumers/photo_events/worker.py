"""
Worker for consuming photo upload notifications from SQS.
"""
import asyncio
import time
import traceback
from typing import Any, Dict, Tuple

from phototag.core.config import settings
from phototag.core.logging import get_logger
from phototag.services.aws.sqs import SQSService
from phototag.services.photo_events import PhotoEventHandler

logger = get_logger(__name__)

# Global flag for signaling shutdown
shutdown_flag = False


def set_shutdown_flag():
    """Set the shutdown flag to signal the worker loop to stop."""
    global shutdown_flag
    shutdown_flag = True
    logger.info("Shutdown flag set, worker will terminate after current batch")


class MessageProcessor:
    """Handles SQS message processing and keeps processing statistics."""

    def __init__(self, sqs_service: SQSService, handler: PhotoEventHandler):
        self.sqs_service = sqs_service
        self.handler = handler

        # Stats tracking
        self.total_processed = 0
        self.successful_processed = 0
        self.photos_processed = 0
        self.faces_detected = 0
        self.faces_matched = 0
        self.error_count = 0
        self.start_time = time.time()
        self.last_stats_time = self.start_time

    async def process_single_message(self, message: Dict[str, Any]) -> Tuple[bool, str, str]:
        """Process a single queued notification.

        Args:
            message: SQS message as returned by SQSService.receive_messages

        Returns:
            Tuple: (success, message_id, receipt_handle)
        """
        receipt_handle = message['receipt_handle']
        message_id = message.get('message_id', 'unknown')

        try:
            batch = await self.handler.handle_batch(message['body'])
        except Exception as e:
            error_details = traceback.format_exc()
            logger.error(f"Error processing message {message_id}: {str(e)}\n{error_details}")
            return False, message_id, receipt_handle

        for outcome in batch.outcomes:
            if outcome.report is None:
                continue
            self.photos_processed += 1
            self.faces_detected += outcome.report.detected
            self.faces_matched += outcome.report.matched
        return True, message_id, receipt_handle

    async def process_batch(self, messages) -> None:
        """Process one received batch and delete the messages that succeeded."""
        tasks = [
            asyncio.create_task(self.process_single_message(message))
            for message in messages
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for result in results:
            self.total_processed += 1

            if isinstance(result, Exception):
                logger.error(f"Task raised exception: {str(result)}")
                self.error_count += 1
                continue

            success, message_id, receipt_handle = result
            if success:
                self.successful_processed += 1
                deleted = await self.sqs_service.delete_message(receipt_handle)
                if not deleted:
                    logger.warning(f"Failed to delete message {message_id}. It might be processed again.")
            else:
                # Left on the queue; visibility timeout and redrive policy decide retries
                self.error_count += 1

    def log_stats(self, force: bool = False):
        """Log processing statistics."""
        current_time = time.time()
        if force or current_time - self.last_stats_time > settings.WORKER_STATS_INTERVAL:
            elapsed = current_time - self.start_time
            logger.info(
                f"Stats: Processed {self.total_processed} messages, {self.successful_processed} successful "
                f"({elapsed:.2f} seconds)"
            )
            logger.info(
                f"Photo statistics: {self.photos_processed} photos reconciled, "
                f"{self.faces_matched} of {self.faces_detected} faces matched, {self.error_count} errors"
            )
            self.last_stats_time = current_time


async def process_messages(sqs_service: SQSService, handler: PhotoEventHandler) -> MessageProcessor:
    """Process notifications from the SQS queue until shutdown is requested.

    Args:
        sqs_service: Initialized SQS service
        handler: Photo event handler

    Returns:
        The processor, with its final statistics
    """
    logger.info(f"Starting message processing in {settings.ENVIRONMENT} environment")
    processor = MessageProcessor(sqs_service, handler)

    try:
        while not shutdown_flag:
            try:
                messages = await sqs_service.receive_messages(
                    max_messages=settings.SQS_BATCH_SIZE,
                    wait_time=settings.SQS_WAIT_TIME,
                )
                if not messages:
                    await asyncio.sleep(1)
                    continue

                logger.info(f"Received {len(messages)} messages from SQS")
                await processor.process_batch(messages)
                processor.log_stats()

            except Exception as e:
                logger.error(f"Error in message processing loop: {str(e)}")
                await asyncio.sleep(5)
    finally:
        processor.log_stats(force=True)

    return processor
