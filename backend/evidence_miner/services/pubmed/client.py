"""
PubMed client facade.

Bundles one configured ResilientFetcher with the individual accessors so
callers (the review orchestrator, the API) depend on a single object that
is easy to replace in tests.
"""
from typing import Dict, List, Optional, Sequence

import httpx

from evidence_miner.schemas.documents import DocumentRecord, SearchResult
from .http import ResilientFetcher, build_eutils_fetcher
from .search import search_pubmed
from .summaries import fetch_summaries
from .abstracts import fetch_abstracts
from .fulltext import fetch_full_text
from .references import fetch_references


class PubMedClient:
    """Async access to PubMed search, summaries, abstracts, PMC full text and references."""

    def __init__(
        self,
        fetcher: Optional[ResilientFetcher] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.fetcher = fetcher or build_eutils_fetcher(transport=transport)

    async def search(
        self,
        keywords: Sequence[str],
        years: int,
        current_year: Optional[int] = None,
    ) -> SearchResult:
        return await search_pubmed(self.fetcher, keywords, years, current_year=current_year)

    async def summaries(self, pmids: Sequence[str]) -> List[DocumentRecord]:
        return await fetch_summaries(self.fetcher, pmids)

    async def abstracts(self, pmids: Sequence[str]) -> Dict[str, str]:
        return await fetch_abstracts(self.fetcher, pmids)

    async def full_text(self, pmid: str) -> Optional[str]:
        return await fetch_full_text(self.fetcher, pmid)

    async def references(self, pmids: Sequence[str]) -> List[str]:
        return await fetch_references(self.fetcher, pmids)
