"""
LLM Client Management

Cached langchain-openai chat clients for the two model roles: a small
model for analysis and title translation, a larger one for the report.
"""
from functools import lru_cache

from langchain_openai import ChatOpenAI

from evidence_miner.core.config import settings


@lru_cache(maxsize=4)
def get_llm(
    model: str = "gpt-4o-mini",
    temperature: float = 0.0
) -> ChatOpenAI:
    """
    Get a cached chat model.

    Args:
        model: OpenAI model name, usually settings.analysis_model or
            settings.synthesis_model
        temperature: Sampling temperature (0 = deterministic)
    """
    return ChatOpenAI(
        model=model,
        temperature=temperature,
        api_key=settings.OPENAI_API_KEY,
        timeout=settings.review_deadline_seconds,
        max_retries=settings.fetch_max_retries,
    )


def get_structured_llm(output_schema, model: str = "gpt-4o-mini"):
    """Chat model whose output is parsed into ``output_schema``."""
    return get_llm(model).with_structured_output(output_schema)


def get_json_llm(model: str = "gpt-4o-mini"):
    """Chat model constrained to answer with a single JSON object."""
    return get_llm(model).bind(response_format={"type": "json_object"})


def clear_llm_cache():
    """Drop cached clients, e.g. after changing settings in tests."""
    get_llm.cache_clear()
