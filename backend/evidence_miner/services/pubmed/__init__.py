"""
PubMed / PMC access through NCBI E-utilities.

Package Structure:
- http.py: ResilientFetcher (retry/backoff over httpx)
- search.py: keyword search with a recency window (esearch)
- summaries.py: bibliographic records (esummary)
- abstracts.py: structured abstracts (efetch, XML)
- fulltext.py: best-effort PMC full text (elink + efetch)
- references.py: first-order citation references (elink)
- client.py: PubMedClient facade over all of the above
"""
from .http import ResilientFetcher, build_eutils_fetcher
from .search import search_pubmed, build_query
from .summaries import fetch_summaries
from .abstracts import fetch_abstracts, parse_abstracts
from .fulltext import fetch_full_text, resolve_pmcid
from .references import fetch_references, collect_references
from .client import PubMedClient

__all__ = [
    "ResilientFetcher",
    "build_eutils_fetcher",
    "search_pubmed",
    "build_query",
    "fetch_summaries",
    "fetch_abstracts",
    "parse_abstracts",
    "fetch_full_text",
    "resolve_pmcid",
    "fetch_references",
    "collect_references",
    "PubMedClient",
]
