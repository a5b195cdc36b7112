"""Face recognition value objects."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class FaceMatch(BaseModel):
    """Match returned by searching one detected face against its collection."""
    detected_face_id: str = Field(..., description="Face identifier that was searched")
    matched_face_id: str = Field(..., description="Enrolled face identifier that matched")
    similarity: float = Field(..., description="Similarity score (0-100)", ge=0.0, le=100.0)


class IdentityRecord(BaseModel):
    """Enrolled identity owning a face identifier."""
    face_id: str = Field(..., description="Enrolled face identifier")
    contact_key: str = Field(..., description="Contact key (e-mail) of the enrolled identity")


class ResolutionStatus(str, Enum):
    """Outcome of resolving one detected face."""
    MATCHED = "matched"
    NO_MATCH = "no_match"
    FAILED = "failed"


class FaceResolution(BaseModel):
    """Tagged result of resolving one detected face to an identity."""
    face_id: str = Field(..., description="Detected face identifier")
    status: ResolutionStatus = Field(..., description="Resolution outcome")
    match: Optional[FaceMatch] = Field(None, description="Selected match, if any")
    identity: Optional[IdentityRecord] = Field(None, description="Resolved identity when matched")
    error: Optional[str] = Field(None, description="Failure description when failed")

    @classmethod
    def matched(cls, match: FaceMatch, identity: IdentityRecord) -> "FaceResolution":
        return cls(
            face_id=match.detected_face_id,
            status=ResolutionStatus.MATCHED,
            match=match,
            identity=identity,
        )

    @classmethod
    def no_match(cls, face_id: str, match: Optional[FaceMatch] = None) -> "FaceResolution":
        return cls(face_id=face_id, status=ResolutionStatus.NO_MATCH, match=match)

    @classmethod
    def failed(cls, face_id: str, error: str, match: Optional[FaceMatch] = None) -> "FaceResolution":
        return cls(face_id=face_id, status=ResolutionStatus.FAILED, match=match, error=error)


class ReconciliationReport(BaseModel):
    """Aggregate result of reconciling one photo against its uploader's collection."""
    photo_key: str = Field(..., description="Object key of the processed photo")
    collection_id: str = Field(..., description="Collection the photo was matched against")
    detected: int = Field(0, description="Number of faces detected in the photo")
    matched: int = Field(0, description="Number of faces resolved to an enrolled identity")
    recorded: int = Field(0, description="Number of associations written")
    failed: int = Field(0, description="Number of faces whose resolution or update failed")
    contact_keys: List[str] = Field(default_factory=list, description="Identities the photo was associated with")
