import asyncio
import signal
import sys

from phototag.consumers.photo_events.worker import process_messages, set_shutdown_flag
from phototag.core.config import settings
from phototag.core.container import container
from phototag.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


def handle_sigterm(signum, frame):
    """Handle SIGTERM signal for graceful shutdown."""
    logger.info(f"Received signal {signum}, initiating graceful shutdown")
    set_shutdown_flag()


async def main():
    """Main entry point for the upload notification queue consumer."""
    signal.signal(signal.SIGTERM, handle_sigterm)
    signal.signal(signal.SIGINT, handle_sigterm)

    logger.info("=" * 50)
    logger.info(f"Starting SQS consumer for queue: {settings.SQS_QUEUE_NAME}")
    logger.info(f"AWS Region: {settings.AWS_REGION}")
    logger.info(f"Batch Size: {settings.SQS_BATCH_SIZE}")
    logger.info("=" * 50)

    try:
        logger.info("Initializing service container...")
        await container.initialize(with_queue=True)
        logger.info("Service container initialized")
    except Exception as e:
        logger.error(f"Failed to initialize service container: {str(e)}")
        return 1

    try:
        await process_messages(
            sqs_service=container.sqs_service,
            handler=container.get_photo_event_handler(),
        )
    except Exception as e:
        logger.error(f"Error in message processing: {str(e)}")
        return 1
    finally:
        logger.info("Cleaning up services...")
        await container.cleanup()
        logger.info("Service cleanup complete")

    logger.info("Service shutdown complete")
    return 0


if __name__ == "__main__":
    setup_logging()
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Service stopped by user")
        sys.exit(0)
