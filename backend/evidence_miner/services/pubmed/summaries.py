"""
Bibliographic summaries (esummary).
"""
from typing import List, Sequence

from evidence_miner.core.exceptions import ParseError
from evidence_miner.core.logging import get_logger
from evidence_miner.schemas.documents import (
    DocumentRecord,
    SUMMARY_UNAVAILABLE_TITLE,
    UNKNOWN_AUTHORS,
)
from .http import ResilientFetcher

logger = get_logger(__name__)


def _format_authors(authors) -> str:
    names = [a.get("name", "") for a in authors or [] if isinstance(a, dict)]
    names = [n for n in names if n]
    return ", ".join(names) or UNKNOWN_AUTHORS


def _placeholder(pmid: str) -> DocumentRecord:
    return DocumentRecord(pmid=pmid, title=SUMMARY_UNAVAILABLE_TITLE)


async def fetch_summaries(fetcher: ResilientFetcher, pmids: Sequence[str]) -> List[DocumentRecord]:
    """
    Resolve PMIDs into DocumentRecord shells with one batched request.

    The output always has one record per input PMID, in input order.
    When esummary omits a PMID (or reports an error for it), a placeholder
    record titled "Summary unavailable" takes its place so downstream
    joins by position and by PMID stay aligned.
    """
    if not pmids:
        return []

    data = await fetcher.get_json("esummary.fcgi", params={
        "db": "pubmed",
        "id": ",".join(pmids),
        "retmode": "json",
    })

    result = data.get("result")
    if not isinstance(result, dict):
        raise ParseError(fetcher.source_name, "esummary response has no result")

    records = []
    for pmid in pmids:
        entry = result.get(pmid)
        if not isinstance(entry, dict) or "error" in entry or not entry.get("title"):
            logger.warning(f"esummary returned no summary for PMID {pmid}, using placeholder")
            records.append(_placeholder(pmid))
            continue

        records.append(DocumentRecord(
            pmid=pmid,
            title=str(entry["title"]),
            authors=_format_authors(entry.get("authors")),
            journal=str(entry.get("source", "") or ""),
            pubdate=str(entry.get("pubdate", "") or ""),
        ))

    return records
