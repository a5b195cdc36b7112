"""Value objects package."""
from .events import BatchReport, EventOutcome, EventStatus
from .recognition import (
    FaceMatch,
    FaceResolution,
    IdentityRecord,
    ReconciliationReport,
    ResolutionStatus,
)

__all__ = [
    "BatchReport",
    "EventOutcome",
    "EventStatus",
    "FaceMatch",
    "FaceResolution",
    "IdentityRecord",
    "ReconciliationReport",
    "ResolutionStatus",
]
