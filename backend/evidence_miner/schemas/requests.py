"""
API Schemas

Request and response models for the HTTP API.
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from .documents import DocumentRecord, EnrichedBundle
from .events import ReviewPhase


class AnalyzeRequest(BaseModel):
    text: str = Field(min_length=1, description="Research background, abstract or keywords (JP/EN)")


class AnalyzeResponse(BaseModel):
    is_japanese: bool
    english_text: str
    mesh_terms: List[str]
    selected_terms: List[str] = Field(description="Terms pre-selected for the first search")


class SearchRequest(BaseModel):
    keywords: List[str] = Field(min_length=1, description="Terms joined with AND")
    years: int = Field(default=5, ge=1, le=100, description="Recency window ending at the current year")


class SearchResponse(BaseModel):
    total_count: int
    documents: List[DocumentRecord]


class ReviewRequest(BaseModel):
    target: str = Field(min_length=1, description="Research statement the review should address")
    pmids: List[str] = Field(min_length=1, description="Selected documents, in display order")


class ReviewResponse(BaseModel):
    report: str
    bundle: EnrichedBundle


class ReviewStatus(BaseModel):
    phase: ReviewPhase
    message: str = ""
    error: Optional[str] = None
    has_report: bool = False
