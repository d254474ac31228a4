"""
Literature discovery: search, summaries and translated titles.

This is the step before a review. It produces the candidate documents
the user picks from.
"""
from typing import List, Sequence

from pydantic import BaseModel

from evidence_miner.core.logging import get_logger
from evidence_miner.schemas.documents import DocumentRecord
from evidence_miner.services.pubmed import PubMedClient
from evidence_miner.services.synthesis import Synthesizer

logger = get_logger(__name__)


class DiscoveryResult(BaseModel):
    total_count: int
    documents: List[DocumentRecord]


async def discover(
    client: PubMedClient,
    synthesizer: Synthesizer,
    keywords: Sequence[str],
    years: int,
) -> DiscoveryResult:
    """
    Search PubMed and return summary records with translated titles.

    Titles the backend did not translate keep ``translated_title=None``;
    a failing translation backend leaves every title untranslated.
    """
    result = await client.search(keywords, years)
    if not result.pmids:
        return DiscoveryResult(total_count=result.total_count, documents=[])

    documents = await client.summaries(result.pmids)

    try:
        translations = await synthesizer.translate_titles({d.pmid: d.title for d in documents})
    except Exception as e:
        logger.warning(f"Title translation failed, showing original titles: {e!r}")
        translations = {}
    documents = [d.with_translated_title(translations.get(d.pmid)) for d in documents]

    logger.info(
        f"Discovery: {result.total_count} hits, {len(documents)} shown, "
        f"{len(translations)} titles translated"
    )
    return DiscoveryResult(total_count=result.total_count, documents=documents)
