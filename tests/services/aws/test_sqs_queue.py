"""Tests for the SQS notification queue."""
from types import SimpleNamespace

import pytest

from phototag.services.aws.sqs import SQSService, decode_message


def queued(message_id, body):
    return SimpleNamespace(message_id=message_id, receipt_handle=f"rh-{message_id}", body=body)


class FakeQueue:
    url = "https://sqs.us-east-1.amazonaws.com/123/uploads"

    def __init__(self, messages=(), delete_response=None, delete_error=None):
        self.messages = list(messages)
        self.delete_response = delete_response or {"Successful": [{"Id": "1"}]}
        self.delete_error = delete_error
        self.receive_calls = []
        self.delete_calls = []

    def receive_messages(self, **kwargs):
        self.receive_calls.append(kwargs)
        return self.messages

    def delete_messages(self, Entries):
        self.delete_calls.append(Entries)
        if self.delete_error:
            raise self.delete_error
        return self.delete_response


@pytest.fixture
def make_service():
    def make(queue):
        service = SQSService(region_name="us-east-1", queue_name="uploads")
        service.queue = queue
        service.initialized = True
        return service
    return make


def test_decode_json_body():
    decoded = decode_message(queued("m1", '{"Records": []}'))

    assert decoded == {"message_id": "m1", "receipt_handle": "rh-m1", "body": {"Records": []}}


def test_decode_keeps_raw_body_when_not_json():
    assert decode_message(queued("m1", "not json"))["body"] == "not json"


class TestSQSService:
    """Test suite for receiving and acknowledging messages."""

    async def test_receive_decodes_every_message(self, make_service):
        queue = FakeQueue([queued("m1", '{"Records": []}'), queued("m2", "garbage")])
        service = make_service(queue)

        messages = await service.receive_messages(max_messages=5, wait_time=1)

        assert [m["body"] for m in messages] == [{"Records": []}, "garbage"]
        assert queue.receive_calls[0]["MaxNumberOfMessages"] == 5
        assert queue.receive_calls[0]["WaitTimeSeconds"] == 1

    async def test_delete_success(self, make_service):
        queue = FakeQueue()

        assert await make_service(queue).delete_message("rh-m1") is True
        assert queue.delete_calls[0][0]["ReceiptHandle"] == "rh-m1"

    async def test_delete_rejected_entry(self, make_service):
        queue = FakeQueue(delete_response={"Failed": [{"Id": "1", "Code": "ReceiptHandleIsInvalid"}]})

        assert await make_service(queue).delete_message("rh-m1") is False

    async def test_delete_error(self, make_service):
        queue = FakeQueue(delete_error=RuntimeError("network down"))

        assert await make_service(queue).delete_message("rh-m1") is False
