"""Tests for end-to-end handling of upload notifications."""
import pytest

from phototag.core.exceptions import FaceCollectionError, StorageError
from phototag.domain.entities.photo import PhotoEvent
from phototag.domain.value_objects.events import EventStatus


@pytest.fixture
def alice_uploads(metadata_store, face_collection, identity_store):
    """Photos p1..p3 uploaded by alice, whose collection enrolls bob as e1."""
    for key in ("p1.jpg", "p2.jpg", "p3.jpg"):
        metadata_store.metadata[("photos", key)] = {"user": "alice"}
    face_collection.enroll("alice", "e1")
    identity_store.identities["e1"] = "bob@example.com"
    return metadata_store


async def test_unsupported_extension_has_no_side_effects(
    photo_event_handler, metadata_store, face_collection, association_store
):
    outcome = await photo_event_handler.handle_event(PhotoEvent(bucket="photos", key="notes.txt"))

    assert outcome.status == EventStatus.SKIPPED_UNSUPPORTED
    assert metadata_store.calls == []
    assert face_collection.calls == []
    assert association_store.additions == []


async def test_missing_uploader_has_no_face_calls(
    photo_event_handler, metadata_store, face_collection, association_store
):
    metadata_store.metadata[("photos", "p1.jpg")] = {"camera": "x100"}

    outcome = await photo_event_handler.handle_event(PhotoEvent(bucket="photos", key="p1.jpg"))

    assert outcome.status == EventStatus.SKIPPED_NO_UPLOADER
    assert metadata_store.calls == [("photos", "p1.jpg")]
    assert face_collection.calls == []
    assert association_store.additions == []


async def test_processed_event_carries_report(
    photo_event_handler, alice_uploads, face_collection, association_store
):
    face_collection.photo_faces["p1.jpg"] = ["f1", "f2"]
    face_collection.search_results["f1"] = [("e1", 92.0)]

    outcome = await photo_event_handler.handle_event(PhotoEvent(bucket="photos", key="p1.jpg"))

    assert outcome.status == EventStatus.PROCESSED
    assert outcome.uploader == "alice"
    assert (outcome.report.matched, outcome.report.detected) == (1, 2)
    assert association_store.photos == {"bob@example.com": {"p1.jpg"}}


async def test_batch_processes_every_record(
    photo_event_handler, alice_uploads, face_collection, association_store, notification
):
    for key, face_id in (("p1.jpg", "f1"), ("p2.jpg", "f2")):
        face_collection.photo_faces[key] = [face_id]
        face_collection.search_results[face_id] = [("e1", 90.0)]

    batch = await photo_event_handler.handle_batch(
        notification(("photos", "readme.md"), ("photos", "p1.jpg"), ("photos", "p2.jpg"))
    )

    assert [outcome.status for outcome in batch.outcomes] == [
        EventStatus.SKIPPED_UNSUPPORTED,
        EventStatus.PROCESSED,
        EventStatus.PROCESSED,
    ]
    assert batch.processed == 2
    assert association_store.photos == {"bob@example.com": {"p1.jpg", "p2.jpg"}}


async def test_first_record_only_stops_after_first_supported_record(
    photo_event_handler, alice_uploads, face_collection, notification
):
    photo_event_handler.process_first_record_only = True

    batch = await photo_event_handler.handle_batch(
        notification(("photos", "readme.md"), ("photos", "p1.jpg"), ("photos", "p2.jpg"))
    )

    assert [outcome.event.key for outcome in batch.outcomes] == ["readme.md", "p1.jpg"]
    assert [call[2] for call in face_collection.calls_named("index_faces")] == ["p1.jpg"]


async def test_first_record_only_stops_even_without_uploader(
    photo_event_handler, metadata_store, face_collection, notification
):
    photo_event_handler.process_first_record_only = True
    metadata_store.metadata[("photos", "p2.jpg")] = {"user": "alice"}

    batch = await photo_event_handler.handle_batch(
        notification(("photos", "p1.jpg"), ("photos", "p2.jpg"))
    )

    assert [outcome.status for outcome in batch.outcomes] == [EventStatus.SKIPPED_NO_UPLOADER]
    assert face_collection.calls == []


async def test_metadata_failure_is_fatal(photo_event_handler, metadata_store, face_collection, notification):
    metadata_store.error = StorageError("Access denied for object: photos/p1.jpg")

    with pytest.raises(StorageError):
        await photo_event_handler.handle_batch(notification(("photos", "p1.jpg")))

    assert face_collection.calls == []


async def test_indexing_failure_is_fatal(photo_event_handler, alice_uploads, face_collection, notification):
    face_collection.index_error = FaceCollectionError("ResourceNotFoundException")

    with pytest.raises(FaceCollectionError):
        await photo_event_handler.handle_batch(notification(("photos", "p1.jpg"), ("photos", "p2.jpg")))

    assert len(face_collection.calls_named("index_faces")) == 1
