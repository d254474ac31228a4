"""
Common types and constants for the review pipeline.
"""
from typing import Callable, Optional
from evidence_miner.schemas.events import ReviewPhase

# Type alias for progress callbacks
ProgressCallback = Callable[[ReviewPhase, str, Optional[str]], None]

GENERIC_FAILURE_MESSAGE = "An error occurred during synthesis. Please try again."
DEFAULT_SELECTED_TERMS = 5


def _noop_callback(phase: ReviewPhase, message: str, detail: Optional[str] = None):
    """Default no-op callback when none provided."""
    pass
