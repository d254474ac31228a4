"""
Document Schemas

Pydantic models for the evidence passing through the review pipeline:
- DocumentRecord: one PubMed article, enriched stage by stage
- SearchResult: the outcome of a keyword search
- EnrichedBundle: the terminal artifact handed to synthesis
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


ABSTRACT_UNAVAILABLE = "No abstract available."
UNKNOWN_AUTHORS = "Unknown Authors"
SUMMARY_UNAVAILABLE_TITLE = "Summary unavailable"


class DocumentRecord(BaseModel):
    """
    A PubMed article and whatever enrichment has been gathered for it.

    Records are frozen: enrichment produces a copy with one more field
    filled in. ``full_text`` stays None both before and after a failed
    attempt; ``fulltext_attempted`` tells the two apart.
    """
    model_config = ConfigDict(frozen=True)

    pmid: str
    title: str
    translated_title: Optional[str] = None
    authors: str = UNKNOWN_AUTHORS
    journal: str = ""
    pubdate: str = ""
    abstract: Optional[str] = None
    full_text: Optional[str] = None
    fulltext_attempted: bool = False

    @property
    def has_fulltext(self) -> bool:
        return self.full_text is not None

    @property
    def url(self) -> str:
        return f"https://pubmed.ncbi.nlm.nih.gov/{self.pmid}/"

    def with_abstract(self, abstract: Optional[str]) -> "DocumentRecord":
        if abstract is None:
            return self
        return self.model_copy(update={"abstract": abstract})

    def with_full_text(self, full_text: Optional[str]) -> "DocumentRecord":
        update = {"fulltext_attempted": True}
        if full_text is not None:
            update["full_text"] = full_text
        return self.model_copy(update=update)

    def with_translated_title(self, translated_title: Optional[str]) -> "DocumentRecord":
        if not translated_title:
            return self
        return self.model_copy(update={"translated_title": translated_title})


class SearchResult(BaseModel):
    """Total hit count plus the first page of PMIDs, ranked by relevance."""
    total_count: int = Field(ge=0, description="Total matches; may exceed len(pmids)")
    pmids: List[str] = Field(default_factory=list)


class EnrichedBundle(BaseModel):
    """Everything the synthesizer needs for one review."""
    model_config = ConfigDict(frozen=True)

    target: str
    primary: List[DocumentRecord]
    references: List[DocumentRecord] = Field(default_factory=list)


class ReviewResult(BaseModel):
    """A finished review: the evidence bundle and the generated report."""
    bundle: EnrichedBundle
    report: str


class AnalysisResult(BaseModel):
    """Structured output of the initial free-text analysis"""
    is_japanese: bool = Field(description="True if the input text was written in Japanese")
    english_text: str = Field(description="The input translated to academic English, or unchanged if already English")
    mesh_terms: List[str] = Field(description="10-15 MeSH-like keywords describing the input")
