"""Upload notification parsing and image eligibility."""
import json
from typing import Any, List
from urllib.parse import unquote_plus

from phototag.core.exceptions import InvalidEventError
from phototag.core.logging import get_logger
from phototag.domain.entities.photo import PhotoEvent

logger = get_logger(__name__)

# Case-sensitive on purpose: ".Jpg" is not accepted.
SUPPORTED_IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".PNG", ".JPG", ".JPEG"})

S3_TEST_EVENT = "s3:TestEvent"


def image_extension(key: str) -> str:
    """Return the extension of the last path segment of ``key``, dot included."""
    name = key.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def is_supported_image(key: str) -> bool:
    """Check whether an object key names a supported image type."""
    return image_extension(key) in SUPPORTED_IMAGE_EXTENSIONS


def parse_photo_events(payload: Any) -> List[PhotoEvent]:
    """Extract upload events from an S3 notification.

    Accepts S3 notifications delivered directly and notifications wrapped in SQS
    records (each record ``body`` holding the notification JSON). S3 test events
    carry no records and yield nothing.

    Args:
        payload: Decoded notification

    Returns:
        Upload events in record order, with object keys URL-decoded

    Raises:
        InvalidEventError: If the notification is not an object, or a record
            lacks the bucket name or object key
    """
    if not isinstance(payload, dict):
        raise InvalidEventError(
            "Notification is not a JSON object",
            details={"type": type(payload).__name__},
        )

    if payload.get("Event") == S3_TEST_EVENT:
        logger.info("Ignoring S3 test event", bucket=payload.get("Bucket"))
        return []

    events = []
    for index, record in enumerate(payload.get("Records") or []):
        if not isinstance(record, dict):
            raise InvalidEventError(
                f"Record {index} is not an S3 object notification",
                details={"record": index},
            )

        if "s3" not in record and "body" in record:
            try:
                body = json.loads(record["body"])
            except (TypeError, ValueError) as e:
                raise InvalidEventError(
                    f"Record {index} body is not a JSON notification",
                    details={"record": index},
                ) from e
            events.extend(parse_photo_events(body))
            continue

        try:
            bucket = record["s3"]["bucket"]["name"]
            key = record["s3"]["object"]["key"]
        except (KeyError, TypeError) as e:
            raise InvalidEventError(
                f"Record {index} is not an S3 object notification",
                details={"record": index, "event_name": record.get("eventName")},
            ) from e

        events.append(PhotoEvent(bucket=bucket, key=unquote_plus(key)))
    return events
