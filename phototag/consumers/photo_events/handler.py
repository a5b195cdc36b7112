"""
AWS Lambda entry point for S3 photo upload notifications.
"""
import asyncio
from typing import Any, Dict

from phototag.core.container import container
from phototag.core.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


async def handle_notification(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Handle one S3 (or SQS-wrapped S3) notification with the shared container."""
    if not container.initialized:
        logger.info("Initializing service container")
        await container.initialize()

    handler = container.get_photo_event_handler()
    batch = await handler.handle_batch(payload)
    return batch.model_dump(mode="json")


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler; errors propagate so the invocation is reported as failed."""
    request_id = getattr(context, "aws_request_id", None)
    logger.info("Received upload notification",
                request_id=request_id, records=len(event.get("Records") or []))
    return asyncio.run(handle_notification(event))
