"""
Evidence review orchestration.

Runs the enrichment pipeline for a set of selected documents:
1. Abstracts for the selection (one batched efetch)
2. PMC full text, one document at a time by default
3. First-order references of the selection, capped
4. Summaries and abstracts for those references
5. Synthesis of the merged bundle into a report

Each phase is announced through the progress callback before its network
work starts. Any failure outside the best-effort full-text step stops
the run in FAILED with a generic message; no partial bundle escapes.
"""
import asyncio
from typing import Dict, List, Optional, Sequence

from evidence_miner.core.config import settings
from evidence_miner.core.logging import get_logger
from evidence_miner.schemas.documents import DocumentRecord, EnrichedBundle, ReviewResult
from evidence_miner.schemas.events import ReviewPhase
from evidence_miner.services.pubmed import PubMedClient
from evidence_miner.services.synthesis import Synthesizer
from .types import GENERIC_FAILURE_MESSAGE, ProgressCallback, _noop_callback

logger = get_logger(__name__)


class ReviewOrchestrator:
    """
    Phase state machine for one session's evidence reviews.

    Only one review runs at a time: ``run`` is ignored (returns None)
    while a previous run is still in a non-terminal phase. Every accepted
    run starts from IDLE with no state carried over.
    """

    def __init__(
        self,
        client: PubMedClient,
        synthesizer: Synthesizer,
        max_reference_documents: Optional[int] = None,
        fulltext_concurrency: Optional[int] = None,
        deadline_seconds: Optional[float] = None,
    ):
        self.client = client
        self.synthesizer = synthesizer
        self.max_reference_documents = (
            settings.max_reference_documents
            if max_reference_documents is None else max_reference_documents
        )
        self.fulltext_concurrency = fulltext_concurrency or settings.fulltext_concurrency
        self.deadline_seconds = deadline_seconds or settings.review_deadline_seconds

        self._phase = ReviewPhase.IDLE
        self._on_progress: ProgressCallback = _noop_callback
        self.status_message = ""
        self.error_message: Optional[str] = None
        self.result: Optional[ReviewResult] = None

    @property
    def phase(self) -> ReviewPhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase.is_running

    def _enter(self, phase: ReviewPhase, message: str, detail: Optional[str] = None):
        self._phase = phase
        self.status_message = message
        logger.info(f"[{phase.value}] {message}" + (f" ({detail})" if detail else ""))
        try:
            self._on_progress(phase, message, detail)
        except Exception as e:
            # Observer errors never change the run's outcome
            logger.warning(f"Progress callback failed on {phase.value}: {e!r}")

    def _reset(self, on_progress: ProgressCallback):
        self._phase = ReviewPhase.IDLE
        self._on_progress = on_progress
        self.status_message = ""
        self.error_message = None
        self.result = None

    async def run(
        self,
        target: str,
        selected: Sequence[DocumentRecord],
        on_progress: ProgressCallback = _noop_callback,
    ) -> Optional[ReviewResult]:
        """
        Enrich ``selected`` and synthesize a report about ``target``.

        Returns the ReviewResult, or None when the run was ignored
        (already running, nothing selected) or failed. After a failure
        ``phase`` is FAILED and ``error_message`` holds the user-facing
        message.
        """
        if self.is_running:
            logger.warning(f"Review already running ({self._phase.value}), ignoring new request")
            return None
        if not selected:
            logger.warning("Review requested with no selected documents, ignoring")
            return None

        self._reset(on_progress)
        documents = list(selected)

        # Entered before the first await so a concurrent run() sees it
        self._enter(
            ReviewPhase.RESOLVING_ABSTRACTS,
            "Retrieving abstracts...",
            f"{len(documents)} documents"
        )

        try:
            result = await asyncio.wait_for(
                self._run_phases(target, documents),
                timeout=self.deadline_seconds,
            )
        except Exception as e:
            logger.error(f"Review failed during {self._phase.value}: {e!r}")
            self.error_message = GENERIC_FAILURE_MESSAGE
            self._enter(ReviewPhase.FAILED, GENERIC_FAILURE_MESSAGE)
            return None

        self.result = result
        self._enter(
            ReviewPhase.DONE,
            "Report ready",
            f"{len(result.bundle.primary)} primary, {len(result.bundle.references)} references"
        )
        return result

    async def _run_phases(self, target: str, documents: List[DocumentRecord]) -> ReviewResult:
        pmids = [doc.pmid for doc in documents]

        abstracts = await self.client.abstracts(pmids)

        self._enter(
            ReviewPhase.RESOLVING_FULLTEXT,
            "Attempting full text retrieval (PMC)...",
            f"{len(pmids)} documents"
        )
        full_texts = await self._resolve_full_texts(pmids)

        self._enter(
            ReviewPhase.RESOLVING_REFERENCES,
            "Analyzing citation network...",
            f"{sum(1 for t in full_texts.values() if t)} of {len(pmids)} with full text"
        )
        reference_ids = (await self.client.references(pmids))[:self.max_reference_documents]

        self._enter(
            ReviewPhase.RESOLVING_REFERENCE_DETAIL,
            "Retrieving reference details...",
            f"{len(reference_ids)} references"
        )
        references = await self._resolve_references(reference_ids)

        self._enter(ReviewPhase.SYNTHESIZING, "Synthesizing report...", None)
        primary = [
            doc.with_abstract(abstracts.get(doc.pmid)).with_full_text(full_texts.get(doc.pmid))
            for doc in documents
        ]
        bundle = EnrichedBundle(target=target, primary=primary, references=references)
        report = await self.synthesizer.synthesize(bundle)

        return ReviewResult(bundle=bundle, report=report)

    async def _resolve_full_texts(self, pmids: List[str]) -> Dict[str, Optional[str]]:
        semaphore = asyncio.Semaphore(self.fulltext_concurrency)

        async def resolve(pmid: str) -> Optional[str]:
            async with semaphore:
                try:
                    return await self.client.full_text(pmid)
                except Exception as e:
                    logger.debug(f"Full text for PMID {pmid} unavailable: {e}")
                    return None

        texts = await asyncio.gather(*(resolve(pmid) for pmid in pmids))
        return dict(zip(pmids, texts))

    async def _resolve_references(self, reference_ids: List[str]) -> List[DocumentRecord]:
        if not reference_ids:
            return []
        shells = await self.client.summaries(reference_ids)
        abstracts = await self.client.abstracts(reference_ids)
        return [shell.with_abstract(abstracts.get(shell.pmid)) for shell in shells]
