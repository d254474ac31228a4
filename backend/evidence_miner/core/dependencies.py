"""
FastAPI Dependencies

FastAPI dependency injection for services and configuration.
Using Depends() makes the NCBI client and the LLM backend easy to swap
in tests through app.dependency_overrides.
"""
from functools import lru_cache

from evidence_miner.core.config import Settings
from evidence_miner.services.pubmed import PubMedClient
from evidence_miner.services.synthesis import OpenAISynthesizer, Synthesizer
from evidence_miner.services.review import ReviewSession


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache()
def get_pubmed_client() -> PubMedClient:
    return PubMedClient()


@lru_cache()
def get_synthesizer() -> Synthesizer:
    return OpenAISynthesizer()


@lru_cache()
def get_review_session() -> ReviewSession:
    """
    Get the review session.

    The app serves a single researcher, so there is one session per
    process. Override in tests to inject fake clients:

        app.dependency_overrides[get_review_session] = lambda: ReviewSession(fake_client, fake_synth)
    """
    return ReviewSession(get_pubmed_client(), get_synthesizer())
