"""
First-order citation references (elink pubmed_pubmed_refs).
"""
from typing import Dict, List, Optional, Sequence

from evidence_miner.core.config import settings
from evidence_miner.core.exceptions import ParseError
from evidence_miner.core.logging import get_logger
from .http import ResilientFetcher

logger = get_logger(__name__)

REFERENCES_LINKNAME = "pubmed_pubmed_refs"


def collect_references(data: Dict, per_source_cap: int) -> List[str]:
    """
    Flatten elink linksets into a deduplicated list of reference PMIDs.

    Each linkset belongs to one source article; at most ``per_source_cap``
    of its references are admitted. First-seen order is kept.
    """
    linksets = data.get("linksets") or []
    if not isinstance(linksets, list):
        raise ParseError("NCBI E-utilities", "elink linksets is not a list")

    seen: Dict[str, None] = {}
    for linkset in linksets:
        if not isinstance(linkset, dict):
            continue
        for linkdb in linkset.get("linksetdbs") or []:
            if not isinstance(linkdb, dict):
                continue
            if linkdb.get("linkname") != REFERENCES_LINKNAME:
                continue
            for link in (linkdb.get("links") or [])[:per_source_cap]:
                seen.setdefault(str(link), None)
    return list(seen)


async def fetch_references(
    fetcher: ResilientFetcher,
    pmids: Sequence[str],
    per_source_cap: Optional[int] = None,
) -> List[str]:
    """
    Resolve the references cited by ``pmids`` with a single elink call.

    One ``id`` parameter is sent per source so NCBI answers with one
    linkset per source instead of merging them.
    """
    if not pmids:
        return []
    per_source_cap = per_source_cap or settings.references_per_source

    params = [("dbfrom", "pubmed"), ("linkname", REFERENCES_LINKNAME), ("retmode", "json")]
    params.extend(("id", pmid) for pmid in pmids)

    data = await fetcher.get_json("elink.fcgi", params=params)
    references = collect_references(data, per_source_cap)
    logger.info(f"Citation network: {len(references)} unique references from {len(pmids)} sources")
    return references
