"""
Per-session review state.

Holds the documents from the latest search (so a review request can refer
to them by PMID), the session's orchestrator and any review task still
streaming. State is process-local and lost on restart.
"""
import asyncio
from typing import Dict, List, Optional, Sequence, Set

from evidence_miner.core.logging import get_logger
from evidence_miner.schemas.documents import DocumentRecord, ReviewResult
from evidence_miner.services.pubmed import PubMedClient
from evidence_miner.services.synthesis import Synthesizer
from .orchestrator import ReviewOrchestrator

logger = get_logger(__name__)


class ReviewSession:
    def __init__(self, client: PubMedClient, synthesizer: Synthesizer):
        self.client = client
        self.synthesizer = synthesizer
        self.orchestrator = ReviewOrchestrator(client, synthesizer)
        self._documents: Dict[str, DocumentRecord] = {}
        self._tasks: Set[asyncio.Task] = set()

    def remember(self, documents: Sequence[DocumentRecord]):
        """Replace the remembered search results."""
        self._documents = {doc.pmid: doc for doc in documents}

    def track(self, task: asyncio.Task) -> asyncio.Task:
        """Hold a reference to a background review task until it finishes."""
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending_tasks(self) -> Set[asyncio.Task]:
        return set(self._tasks)

    @property
    def documents(self) -> List[DocumentRecord]:
        return list(self._documents.values())

    @property
    def last_result(self) -> Optional[ReviewResult]:
        return self.orchestrator.result

    async def resolve_selection(self, pmids: Sequence[str]) -> List[DocumentRecord]:
        """
        Records for the selected PMIDs, in the given order.

        PMIDs not seen in the latest search are summarized on the fly.
        """
        unique = list(dict.fromkeys(pmids))
        unknown = [pmid for pmid in unique if pmid not in self._documents]
        fetched = {}
        if unknown:
            logger.debug(f"Fetching summaries for {len(unknown)} PMIDs outside the last search")
            fetched = {doc.pmid: doc for doc in await self.client.summaries(unknown)}
        return [self._documents.get(pmid) or fetched[pmid] for pmid in unique]
