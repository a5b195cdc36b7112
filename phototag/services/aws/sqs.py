"""
SQS service for receiving photo upload notifications.
"""
import asyncio
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

import boto3

from phototag.core.config import settings

logger = logging.getLogger(__name__)


def decode_message(message) -> Dict[str, Any]:
    """Convert a boto3 SQS message into the worker's message dict.

    A body that is not JSON is passed through as the raw string, so the
    handler rejects it and the worker counts it as a failed message.
    """
    try:
        body = json.loads(message.body)
    except json.JSONDecodeError:
        logger.warning(f"Message {message.message_id} body is not JSON")
        body = message.body

    return {
        'message_id': message.message_id,
        'receipt_handle': message.receipt_handle,
        'body': body,
    }


class SQSService:
    """Consumes S3 upload notifications delivered to an SQS queue.

    Failed messages are never deleted here; the queue's visibility timeout
    and redrive policy decide when they come back or move to a dead-letter queue.
    """

    def __init__(
        self,
        region_name: Optional[str] = None,
        queue_name: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None
    ):
        self.region_name = region_name or settings.AWS_REGION
        self.queue_name = queue_name or settings.SQS_QUEUE_NAME
        self.access_key_id = access_key_id or settings.AWS_ACCESS_KEY_ID
        self.secret_access_key = secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        self.queue = None
        self.initialized = False

    def _resource_args(self) -> Dict[str, Any]:
        args: Dict[str, Any] = {"region_name": self.region_name}
        if self.access_key_id and self.secret_access_key:
            args["aws_access_key_id"] = self.access_key_id
            args["aws_secret_access_key"] = self.secret_access_key
        return args

    async def initialize(self) -> None:
        """Look up the queue. Safe to call more than once."""
        if self.initialized:
            return

        logger.info(f"Connecting to SQS queue {self.queue_name} in {self.region_name}")
        try:
            sqs = boto3.resource('sqs', **self._resource_args())
            self.queue = await asyncio.to_thread(sqs.get_queue_by_name, QueueName=self.queue_name)
        except Exception as e:
            logger.error(f"Failed to look up SQS queue {self.queue_name}: {str(e)}")
            raise

        self.initialized = True
        logger.info(f"Using SQS queue {self.queue.url}")

    async def cleanup(self) -> None:
        """Forget the queue; boto3 resources hold nothing to close."""
        self.queue = None
        self.initialized = False

    async def receive_messages(self, max_messages: int = 10, wait_time: int = 20) -> List[Dict]:
        """
        Long-poll the queue for notifications.

        Args:
            max_messages: Maximum number of messages to receive (1-10)
            wait_time: Long polling wait time in seconds

        Returns:
            Dicts with ``message_id``, ``receipt_handle`` and decoded ``body``
        """
        await self.initialize()

        try:
            messages = await asyncio.to_thread(
                self.queue.receive_messages,
                MaxNumberOfMessages=max_messages,
                WaitTimeSeconds=wait_time,
                AttributeNames=['All'],
            )
        except Exception as e:
            logger.error(f"Failed to receive messages from {self.queue_name}: {str(e)}")
            raise

        return [decode_message(message) for message in messages]

    async def delete_message(self, receipt_handle: str) -> bool:
        """
        Acknowledge a handled message.

        Returns:
            True if the queue accepted the delete, False otherwise
        """
        await self.initialize()

        try:
            response = await asyncio.to_thread(
                self.queue.delete_messages,
                Entries=[{'Id': str(uuid.uuid4()), 'ReceiptHandle': receipt_handle}],
            )
        except Exception as e:
            logger.error(f"Failed to delete message from {self.queue_name}: {str(e)}")
            return False

        failed = response.get('Failed') or []
        for entry in failed:
            logger.error(f"SQS rejected delete: {entry.get('Code')} {entry.get('Message')}")
        return not failed
