"""
PubMed keyword search (esearch).
"""
from datetime import date
from typing import Optional, Sequence

from evidence_miner.core.config import settings
from evidence_miner.core.exceptions import EmptyQueryError, ParseError
from evidence_miner.core.logging import get_logger
from evidence_miner.schemas.documents import SearchResult
from .http import ResilientFetcher

logger = get_logger(__name__)


def build_query(keywords: Sequence[str]) -> str:
    terms = [k.strip() for k in keywords if k and k.strip()]
    if not terms:
        raise EmptyQueryError()
    return " AND ".join(terms)


async def search_pubmed(
    fetcher: ResilientFetcher,
    keywords: Sequence[str],
    years: int,
    current_year: Optional[int] = None,
    max_results: Optional[int] = None,
) -> SearchResult:
    """
    Search PubMed for articles matching every keyword.

    The date window is inclusive and ends at the current year, so
    ``years=5`` in 2026 searches 2021-2026. ``total_count`` is the
    provider's full hit count and is usually larger than the page of
    PMIDs returned.

    Raises:
        EmptyQueryError: no usable keyword was given (no request is made)
    """
    query = build_query(keywords)
    current_year = current_year or date.today().year
    max_results = max_results or settings.search_max_results

    logger.info(f"Searching PubMed: {query[:80]} ({current_year - years}-{current_year})")

    data = await fetcher.get_json("esearch.fcgi", params={
        "db": "pubmed",
        "term": query,
        "datetype": "pdat",
        "mindate": str(current_year - years),
        "maxdate": str(current_year),
        "retmode": "json",
        "retmax": str(max_results),
        "sort": "relevance",
    })

    result = data.get("esearchresult")
    if not isinstance(result, dict):
        raise ParseError(fetcher.source_name, "esearch response has no esearchresult")

    try:
        count = int(result.get("count", 0))
    except (TypeError, ValueError) as e:
        raise ParseError(fetcher.source_name, f"bad esearch count: {result.get('count')!r}") from e

    pmids = [str(pmid) for pmid in (result.get("idlist") or [])][:max_results]
    logger.info(f"  Found {count} matches, returning {len(pmids)}")
    return SearchResult(total_count=count, pmids=pmids)
