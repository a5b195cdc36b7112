"""Core photo domain entities."""
from pydantic import BaseModel, ConfigDict, Field


class PhotoEvent(BaseModel):
    """One uploaded object, as announced by the storage notification."""
    bucket: str = Field(..., description="Bucket the photo was uploaded to")
    key: str = Field(..., description="Object key of the uploaded photo")

    model_config = ConfigDict(frozen=True)


class DetectedFace(BaseModel):
    """Face indexed into the uploader's collection for the duration of one run."""
    face_id: str = Field(..., description="Collection face identifier returned by indexing")
    source_photo_key: str = Field(..., description="Object key of the photo the face was found in")

    model_config = ConfigDict(frozen=True)
