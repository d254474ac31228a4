"""
Selection state for search terms and documents.

Selections are frozensets; toggling returns a new set so callers can
keep the previous value around and compare.
"""
from typing import FrozenSet, Iterable, List, Sequence, TypeVar

from evidence_miner.schemas.documents import DocumentRecord
from .types import DEFAULT_SELECTED_TERMS

T = TypeVar("T")


def toggle(selection: FrozenSet[T], item: T) -> FrozenSet[T]:
    """Add ``item`` if absent, remove it if present."""
    if item in selection:
        return selection - {item}
    return selection | {item}


def initial_terms(terms: Sequence[str], count: int = DEFAULT_SELECTED_TERMS) -> FrozenSet[str]:
    """Pre-select the first few suggested terms."""
    return frozenset(terms[:count])


def ordered_selection(items: Iterable[T], selection: FrozenSet[T]) -> List[T]:
    """Selected items in their original order (sets carry no order)."""
    return [item for item in items if item in selection]


def select_documents(
    documents: Sequence[DocumentRecord],
    selected_pmids: FrozenSet[str],
) -> List[DocumentRecord]:
    return [doc for doc in documents if doc.pmid in selected_pmids]
