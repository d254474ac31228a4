"""
Custom Exceptions

Application-specific exception classes for better error handling
and more informative error messages.

Missing data (no PMC link, no abstract) is not an error: it is
represented by ``None`` or a sentinel string, never by an exception.
"""
from typing import Optional


class EvidenceMinerError(Exception):
    """Base exception for all application errors."""
    pass


# === Data Source Errors ===

class SourceError(EvidenceMinerError):
    """Base exception for data source errors."""
    def __init__(self, source_name: str, message: str):
        self.source_name = source_name
        self.message = message
        super().__init__(f"{source_name}: {message}")


class TransportError(SourceError):
    """Request failed after the retry budget was spent, or with a non-retryable status."""
    def __init__(
        self,
        source_name: str,
        status_code: Optional[int] = None,
        attempts: int = 1,
        detail: Optional[str] = None
    ):
        if status_code is not None:
            msg = f"HTTP {status_code}"
        else:
            msg = "Network error"
        if detail:
            msg += f": {detail}"
        msg += f" (after {attempts} attempt{'s' if attempts != 1 else ''})"
        super().__init__(source_name, msg)
        self.status_code = status_code
        self.attempts = attempts


class ParseError(SourceError):
    """Failed to parse response from data source."""
    def __init__(self, source_name: str, detail: Optional[str] = None):
        msg = "Failed to parse response"
        if detail:
            msg += f": {detail}"
        super().__init__(source_name, msg)


class EmptyQueryError(EvidenceMinerError):
    """A search was requested without any keyword."""
    def __init__(self):
        super().__init__("At least one search keyword is required")


# === Review Errors ===

class ReviewError(EvidenceMinerError):
    """Base exception for evidence review errors."""
    pass


class ReviewInProgressError(ReviewError):
    """A review is already running for this session."""
    def __init__(self, phase: str):
        self.phase = phase
        super().__init__(f"A review is already running (phase: {phase})")


# === LLM/AI Errors ===

class LLMError(EvidenceMinerError):
    """Base exception for LLM-related errors."""
    pass


class LLMParseError(LLMError):
    """Model output could not be decoded into the expected structure."""
    def __init__(self, detail: Optional[str] = None):
        msg = "Could not parse model output"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
