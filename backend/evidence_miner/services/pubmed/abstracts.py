"""
Abstract retrieval (efetch, PubMed XML).

Structured abstracts come as several AbstractText nodes, each with an
optional Label attribute (BACKGROUND, METHODS, ...). They are flattened
into one string as "[LABEL] text [LABEL] text".
"""
from typing import Dict, Optional, Sequence
from xml.etree import ElementTree as ET

from evidence_miner.core.logging import get_logger
from evidence_miner.schemas.documents import ABSTRACT_UNAVAILABLE
from .http import ResilientFetcher

logger = get_logger(__name__)


def _node_text(node: ET.Element) -> str:
    # AbstractText may hold inline markup such as <i> or <sup>
    return "".join(node.itertext())


def extract_abstract(article: ET.Element) -> str:
    """Render every AbstractText of one PubmedArticle, or the sentinel if there are none."""
    parts = []
    for segment in article.iter("AbstractText"):
        label = segment.get("Label")
        prefix = f"[{label}] " if label else ""
        parts.append(prefix + _node_text(segment) + " ")
    return "".join(parts).strip() or ABSTRACT_UNAVAILABLE


def _article_pmid(article: ET.Element) -> Optional[str]:
    node = article.find("MedlineCitation/PMID")
    if node is None:
        node = article.find(".//PMID")
    if node is None or not node.text:
        return None
    return node.text.strip()


def parse_abstracts(root: ET.Element) -> Dict[str, str]:
    abstracts = {}
    for article in root.iter("PubmedArticle"):
        pmid = _article_pmid(article)
        if pmid:
            abstracts[pmid] = extract_abstract(article)
    return abstracts


async def fetch_abstracts(fetcher: ResilientFetcher, pmids: Sequence[str]) -> Dict[str, str]:
    """
    Fetch abstracts for many PMIDs with one efetch call.

    Returns exactly one entry per input PMID. Articles without any
    abstract segment, and PMIDs the provider did not return at all,
    map to ABSTRACT_UNAVAILABLE.
    """
    if not pmids:
        return {}

    root = await fetcher.get_xml("efetch.fcgi", params={
        "db": "pubmed",
        "id": ",".join(pmids),
        "retmode": "xml",
    })
    parsed = parse_abstracts(root)

    missing = [pmid for pmid in pmids if pmid not in parsed]
    if missing:
        logger.debug(f"efetch returned no article for {len(missing)} PMIDs: {missing[:5]}")

    return {pmid: parsed.get(pmid, ABSTRACT_UNAVAILABLE) for pmid in pmids}
