"""
Evidence Review API Routes

FastAPI routes for analyzing a research question, searching PubMed,
running an evidence review and exporting its report.
"""
import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response, StreamingResponse

from evidence_miner.core.dependencies import get_review_session
from evidence_miner.core.exceptions import EmptyQueryError, ReviewInProgressError, SourceError
from evidence_miner.core.logging import get_logger
from evidence_miner.core.rate_limit import limiter, ANALYZE_LIMIT, SEARCH_LIMIT, REVIEW_LIMIT
from evidence_miner.schemas.events import (
    PHASE_CONFIG,
    CompleteEvent,
    ErrorEvent,
    ProgressEvent,
    ReviewPhase,
)
from evidence_miner.schemas.requests import (
    AnalyzeRequest,
    AnalyzeResponse,
    ReviewRequest,
    ReviewResponse,
    ReviewStatus,
    SearchRequest,
    SearchResponse,
)
from evidence_miner.services.export import report_bytes, report_filename
from evidence_miner.services.review import (
    ReviewSession,
    discover,
    initial_terms,
    ordered_selection,
)

logger = get_logger(__name__)

ANALYSIS_FAILED_MESSAGE = "Text analysis failed. Please try again."

router = APIRouter(prefix="/api", tags=["reviews"])


@router.post("/analyze", response_model=AnalyzeResponse)
@limiter.limit(ANALYZE_LIMIT)
async def analyze_text(
    request: Request,
    payload: AnalyzeRequest,
    session: ReviewSession = Depends(get_review_session),
):
    """
    Detect the input language, translate to English if needed and
    suggest MeSH-like search terms. The first five are pre-selected.
    """
    try:
        analysis = await session.synthesizer.analyze(payload.text)
    except Exception as e:
        logger.error(f"Analysis failed: {e!r}")
        raise HTTPException(status_code=500, detail=ANALYSIS_FAILED_MESSAGE)

    selected = ordered_selection(analysis.mesh_terms, initial_terms(analysis.mesh_terms))
    return AnalyzeResponse(
        is_japanese=analysis.is_japanese,
        english_text=analysis.english_text,
        mesh_terms=analysis.mesh_terms,
        selected_terms=selected,
    )


@router.post("/search", response_model=SearchResponse)
@limiter.limit(SEARCH_LIMIT)
async def search_literature(
    request: Request,
    payload: SearchRequest,
    session: ReviewSession = Depends(get_review_session),
):
    """
    Search PubMed with the selected terms (AND-joined) over the last
    ``years`` years. Returns at most 30 summaries with translated titles.
    """
    try:
        result = await discover(session.client, session.synthesizer, payload.keywords, payload.years)
    except EmptyQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SourceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    session.remember(result.documents)
    return SearchResponse(total_count=result.total_count, documents=result.documents)


async def _prepare_review(session: ReviewSession, payload: ReviewRequest):
    if session.orchestrator.is_running:
        raise HTTPException(
            status_code=409,
            detail=str(ReviewInProgressError(session.orchestrator.phase.value))
        )
    try:
        return await session.resolve_selection(payload.pmids)
    except SourceError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/reviews", response_model=ReviewResponse)
@limiter.limit(REVIEW_LIMIT)
async def create_review(
    request: Request,
    payload: ReviewRequest,
    session: ReviewSession = Depends(get_review_session),
):
    """
    Run the full enrichment pipeline for the selected PMIDs and return
    the report together with the evidence bundle it was built from.
    """
    selected = await _prepare_review(session, payload)
    orchestrator = session.orchestrator

    result = await orchestrator.run(payload.target, selected)
    if result is None:
        if orchestrator.phase == ReviewPhase.FAILED:
            raise HTTPException(status_code=500, detail=orchestrator.error_message)
        raise HTTPException(status_code=409, detail="A review is already running")

    return ReviewResponse(report=result.report, bundle=result.bundle)


@router.post("/reviews/stream")
@limiter.limit(REVIEW_LIMIT)
async def create_review_stream(
    request: Request,
    payload: ReviewRequest,
    session: ReviewSession = Depends(get_review_session),
):
    """
    Run a review with streaming progress updates.

    Event types:
    - progress: one per pipeline phase, with percentage
    - report: the generated report and its bundle
    - complete: signal that streaming is done
    - error: the review failed
    """
    selected = await _prepare_review(session, payload)
    orchestrator = session.orchestrator
    progress_queue: asyncio.Queue = asyncio.Queue()

    def progress_callback(phase: ReviewPhase, message: str, detail: Optional[str] = None):
        config = PHASE_CONFIG.get(phase, {"progress": 0})
        progress_queue.put_nowait(ProgressEvent(
            phase=phase,
            message=message,
            detail=detail,
            progress_percent=config["progress"]
        ))

    async def run_review():
        try:
            return await orchestrator.run(payload.target, selected, on_progress=progress_callback)
        finally:
            # Signal completion
            progress_queue.put_nowait(None)

    async def event_generator():
        task = session.track(asyncio.create_task(run_review()))

        while True:
            event = await progress_queue.get()
            if event is None:
                break
            yield f"event: progress\ndata: {event.model_dump_json()}\n\n"

        result = await task
        if result is None:
            error = ErrorEvent(
                message=orchestrator.error_message or "A review is already running",
                phase=orchestrator.phase,
            )
            yield f"event: error\ndata: {error.model_dump_json()}\n\n"
            return

        response = ReviewResponse(report=result.report, bundle=result.bundle)
        yield f"event: report\ndata: {response.model_dump_json()}\n\n"
        complete = CompleteEvent(
            primary_count=len(result.bundle.primary),
            reference_count=len(result.bundle.references),
        )
        yield f"event: complete\ndata: {complete.model_dump_json()}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        }
    )


@router.get("/reviews/status", response_model=ReviewStatus)
async def get_review_status(session: ReviewSession = Depends(get_review_session)):
    orchestrator = session.orchestrator
    return ReviewStatus(
        phase=orchestrator.phase,
        message=orchestrator.status_message,
        error=orchestrator.error_message,
        has_report=session.last_result is not None,
    )


@router.get("/reviews/export")
async def export_review(session: ReviewSession = Depends(get_review_session)):
    """
    Download the latest report as a UTF-8 text file.
    """
    result = session.last_result
    if result is None:
        raise HTTPException(status_code=404, detail="No report available")

    content = report_bytes(result.report)
    filename = report_filename()
    return Response(
        content=content,
        media_type="text/plain; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(content))
        }
    )
