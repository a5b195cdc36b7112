"""Upload event value objects."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from phototag.domain.entities.photo import PhotoEvent
from phototag.domain.value_objects.recognition import ReconciliationReport


class EventStatus(str, Enum):
    """How a single upload event was handled."""
    SKIPPED_UNSUPPORTED = "skipped_unsupported"
    SKIPPED_NO_UPLOADER = "skipped_no_uploader"
    PROCESSED = "processed"


class EventOutcome(BaseModel):
    """Outcome of handling one upload event."""
    event: PhotoEvent = Field(..., description="The handled upload event")
    status: EventStatus = Field(..., description="How the event was handled")
    uploader: Optional[str] = Field(None, description="Resolved uploader, when present")
    report: Optional[ReconciliationReport] = Field(None, description="Reconciliation result for processed events")


class BatchReport(BaseModel):
    """Outcomes of every record handled from one notification."""
    outcomes: List[EventOutcome] = Field(default_factory=list, description="Per-record outcomes, in order")

    @property
    def processed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == EventStatus.PROCESSED)
