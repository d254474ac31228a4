"""
Full text from PubMed Central.

Two hops per article:
1. elink (pubmed -> pmc) to find the PMC copy, if any
2. efetch from the pmc database and flatten the <body> element

Full text is best effort. A missing link, a missing body, a network
failure or a malformed payload all end up as None; nothing raises.
"""
import re
from typing import Optional

from evidence_miner.core.config import settings
from evidence_miner.core.logging import get_logger
from .http import ResilientFetcher

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def provenance_marker(pmcid: str) -> str:
    return f"[FULL TEXT FROM {pmcid}]\n"


async def resolve_pmcid(fetcher: ResilientFetcher, pmid: str) -> Optional[str]:
    """Return "PMC<id>" for the article, or None if PMC holds no copy."""
    data = await fetcher.get_json("elink.fcgi", params={
        "dbfrom": "pubmed",
        "linkname": "pubmed_pmc",
        "id": pmid,
        "retmode": "json",
    })
    try:
        link = data["linksets"][0]["linksetdbs"][0]["links"][0]
    except (KeyError, IndexError, TypeError):
        return None
    return f"PMC{link}"


async def fetch_full_text(
    fetcher: ResilientFetcher,
    pmid: str,
    max_chars: Optional[int] = None,
) -> Optional[str]:
    """
    Fetch the PMC body for one article.

    Returns the whitespace-collapsed body truncated to ``max_chars`` and
    prefixed with "[FULL TEXT FROM PMC...]", or None when unavailable.
    """
    max_chars = max_chars or settings.fulltext_max_chars

    try:
        pmcid = await resolve_pmcid(fetcher, pmid)
        if not pmcid:
            logger.debug(f"No PMC link for PMID {pmid}")
            return None

        root = await fetcher.get_xml("efetch.fcgi", params={
            "db": "pmc",
            "id": pmcid,
            "retmode": "xml",
        })
        body = root if root.tag == "body" else root.find(".//body")
        if body is None:
            logger.debug(f"{pmcid} has no body element (PMID {pmid})")
            return None

        text = _WHITESPACE.sub(" ", " ".join(body.itertext())).strip()
        if not text:
            return None

        logger.debug(f"Full text for PMID {pmid}: {len(text)} chars from {pmcid}")
        return provenance_marker(pmcid) + text[:max_chars]

    except Exception as e:
        logger.debug(f"Full text retrieval failed for PMID {pmid}: {e}")
        return None
