"""
Evidence review pipeline.

Package Structure:
- discovery.py: search + summaries + translated titles
- orchestrator.py: ReviewOrchestrator phase state machine
- selection.py: immutable term/document selection helpers
- session.py: per-session state (last search, orchestrator)
- types.py: progress callback type and constants
"""
from .orchestrator import ReviewOrchestrator
from .discovery import discover, DiscoveryResult
from .selection import toggle, initial_terms, ordered_selection, select_documents
from .session import ReviewSession
from .types import ProgressCallback, GENERIC_FAILURE_MESSAGE, _noop_callback

__all__ = [
    "ReviewOrchestrator",
    "discover",
    "DiscoveryResult",
    "toggle",
    "initial_terms",
    "ordered_selection",
    "select_documents",
    "ReviewSession",
    "ProgressCallback",
    "GENERIC_FAILURE_MESSAGE",
]
