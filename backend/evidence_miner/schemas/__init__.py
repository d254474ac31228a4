"""
Schemas Module

Contains all Pydantic models (DTOs) for:
- Documents flowing through the review pipeline
- API request/response validation
- SSE streaming events
"""
from .documents import (
    ABSTRACT_UNAVAILABLE,
    UNKNOWN_AUTHORS,
    SUMMARY_UNAVAILABLE_TITLE,
    DocumentRecord,
    SearchResult,
    EnrichedBundle,
    ReviewResult,
    AnalysisResult,
)
from .requests import (
    AnalyzeRequest,
    AnalyzeResponse,
    SearchRequest,
    SearchResponse,
    ReviewRequest,
    ReviewResponse,
    ReviewStatus,
)
from .events import (
    ReviewPhase,
    ProgressEvent,
    ErrorEvent,
    CompleteEvent,
    PHASE_CONFIG,
)

__all__ = [
    "ABSTRACT_UNAVAILABLE",
    "UNKNOWN_AUTHORS",
    "SUMMARY_UNAVAILABLE_TITLE",
    "DocumentRecord",
    "SearchResult",
    "EnrichedBundle",
    "ReviewResult",
    "AnalysisResult",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "SearchRequest",
    "SearchResponse",
    "ReviewRequest",
    "ReviewResponse",
    "ReviewStatus",
    "ReviewPhase",
    "ProgressEvent",
    "ErrorEvent",
    "CompleteEvent",
    "PHASE_CONFIG",
]
