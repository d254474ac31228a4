"""
SSE Event Schemas

Pydantic models for Server-Sent Events during an evidence review.
These define the structure of progress updates sent to the frontend.
"""
from pydantic import BaseModel, Field
from typing import Literal, Optional
from enum import Enum


class ReviewPhase(str, Enum):
    """All phases of the enrichment pipeline."""
    IDLE = "idle"
    RESOLVING_ABSTRACTS = "resolving_abstracts"
    RESOLVING_FULLTEXT = "resolving_fulltext"
    RESOLVING_REFERENCES = "resolving_references"
    RESOLVING_REFERENCE_DETAIL = "resolving_reference_detail"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ReviewPhase.DONE, ReviewPhase.FAILED)

    @property
    def is_running(self) -> bool:
        return self not in (ReviewPhase.IDLE, ReviewPhase.DONE, ReviewPhase.FAILED)


class ProgressEvent(BaseModel):
    """Progress update during a review."""
    type: Literal["progress"] = "progress"
    phase: ReviewPhase
    message: str = Field(description="Human-readable status message")
    detail: Optional[str] = Field(default=None, description="Additional detail like '3 references found'")
    progress_percent: int = Field(ge=0, le=100, description="Overall progress percentage")


class ErrorEvent(BaseModel):
    """Error event when the review fails."""
    type: Literal["error"] = "error"
    message: str
    phase: Optional[ReviewPhase] = None


class CompleteEvent(BaseModel):
    """Completion event."""
    type: Literal["complete"] = "complete"
    primary_count: int
    reference_count: int


PHASE_CONFIG = {
    ReviewPhase.IDLE: {"label": "Waiting", "progress": 0},
    ReviewPhase.RESOLVING_ABSTRACTS: {"label": "Retrieving abstracts", "progress": 10},
    ReviewPhase.RESOLVING_FULLTEXT: {"label": "Retrieving full text (PMC)", "progress": 30},
    ReviewPhase.RESOLVING_REFERENCES: {"label": "Analyzing citation network", "progress": 55},
    ReviewPhase.RESOLVING_REFERENCE_DETAIL: {"label": "Retrieving reference details", "progress": 65},
    ReviewPhase.SYNTHESIZING: {"label": "Synthesizing report", "progress": 80},
    ReviewPhase.DONE: {"label": "Complete", "progress": 100},
    ReviewPhase.FAILED: {"label": "Failed", "progress": 100},
}
