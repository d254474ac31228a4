"""
Generative backend for analysis, title translation and report synthesis.

The review pipeline only depends on the Synthesizer interface; the
OpenAI implementation below is one backend satisfying it. Tests plug in
a fake.
"""
import json
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from evidence_miner.core.config import settings
from evidence_miner.core.exceptions import LLMParseError
from evidence_miner.core.logging import get_logger
from evidence_miner.schemas.documents import (
    ABSTRACT_UNAVAILABLE,
    AnalysisResult,
    DocumentRecord,
    EnrichedBundle,
)
from evidence_miner.services.llm import get_json_llm, get_llm, get_structured_llm

logger = get_logger(__name__)

SYNTHESIS_FAILED = "Report generation failed."

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")

SYNTHESIS_SYSTEM_PROMPT = """Role: Senior medical data scientist and systematic review expert.
Task: Write a comprehensive literature review report in {language}.

Report requirements:
- Use professional academic {language}.
- Synthesize the evidence rather than listing it, citing papers by PMID.
- Prefer full-text evidence over abstracts when both are available.
- Use the cited references as background, not as primary evidence.
- Highlight gaps and future research directions."""


class Synthesizer(ABC):
    """
    Abstract text-generation capability used by the review pipeline.

    Contracts:
    - analyze: free text -> language flag, English text, keyword list
    - translate_titles: {pmid: title} -> {pmid: translated title};
      returns {} instead of failing when the model output is unusable
    - synthesize: enriched bundle -> report text, or SYNTHESIS_FAILED
    """

    @abstractmethod
    async def analyze(self, text: str) -> AnalysisResult:
        pass

    @abstractmethod
    async def translate_titles(self, titles: Dict[str, str]) -> Dict[str, str]:
        pass

    @abstractmethod
    async def synthesize(self, bundle: EnrichedBundle) -> str:
        pass


def parse_title_translations(raw: str) -> Dict[str, str]:
    """
    Decode the model's JSON object of translated titles.

    Raises:
        LLMParseError: output is not a JSON object
    """
    cleaned = _CODE_FENCE.sub("", (raw or "").strip())
    try:
        data = json.loads(cleaned or "{}")
    except json.JSONDecodeError as e:
        raise LLMParseError(str(e)) from e
    if not isinstance(data, dict):
        raise LLMParseError(f"expected an object, got {type(data).__name__}")
    return {str(k): v for k, v in data.items() if isinstance(v, str) and v.strip()}


def _message_text(message) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        )
    return ""


def _format_primary(documents: List[DocumentRecord]) -> str:
    blocks = []
    for i, doc in enumerate(documents, 1):
        content = doc.full_text or doc.abstract or ABSTRACT_UNAVAILABLE
        blocks.append(
            f"[Selected Paper {i}]\n"
            f"PMID: {doc.pmid}\n"
            f"Title (translated): {doc.translated_title or 'N/A'}\n"
            f"Title: {doc.title}\n"
            f"Source: {doc.journal} ({doc.pubdate})\n"
            f"Content: {content}"
        )
    return "\n\n".join(blocks)


def _format_references(documents: List[DocumentRecord]) -> str:
    blocks = []
    for i, doc in enumerate(documents, 1):
        blocks.append(
            f"[Background Reference {i}]\n"
            f"PMID: {doc.pmid}\n"
            f"Title: {doc.title}\n"
            f"Abstract: {doc.abstract or ABSTRACT_UNAVAILABLE}"
        )
    return "\n\n".join(blocks)


def build_synthesis_context(bundle: EnrichedBundle) -> str:
    return (
        f'1. TARGET IDEA / RESEARCH THEME:\n"""{bundle.target}"""\n\n'
        f'2. SELECTED PRIMARY ARTICLES (full text or abstracts):\n"""{_format_primary(bundle.primary)}"""\n\n'
        f'3. CITED KEY REFERENCES (citation network):\n"""{_format_references(bundle.references)}"""'
    )


class OpenAISynthesizer(Synthesizer):
    """Synthesizer backed by langchain-openai chat models."""

    def __init__(
        self,
        analysis_model: Optional[str] = None,
        synthesis_model: Optional[str] = None,
        language: Optional[str] = None,
    ):
        self.analysis_model = analysis_model or settings.analysis_model
        self.synthesis_model = synthesis_model or settings.synthesis_model
        self.language = language or settings.report_language

    async def analyze(self, text: str) -> AnalysisResult:
        llm = get_structured_llm(AnalysisResult, model=self.analysis_model)

        prompt = f"""Analyze this medical text.
Task 1: Detect the language. If it is Japanese, translate it to academic English; otherwise keep it as is.
Task 2: Extract 10-15 MeSH-like keywords suitable for a PubMed search.

Input: \"\"\"{text}\"\"\""""

        result = await llm.ainvoke(prompt)
        logger.info(f"ANALYSIS: {len(result.mesh_terms)} terms (japanese={result.is_japanese})")
        return result

    async def translate_titles(self, titles: Dict[str, str]) -> Dict[str, str]:
        if not titles:
            return {}

        llm = get_json_llm(self.analysis_model)

        prompt = f"""You are a professional medical translator.
Translate the following medical article titles into natural {self.language}.
Use standard medical nomenclature for technical terms.
Answer with a JSON object using the same keys (PMIDs).

Input JSON:
{json.dumps(titles, ensure_ascii=False)}"""

        response = await llm.ainvoke(prompt)
        try:
            return parse_title_translations(_message_text(response))
        except LLMParseError as e:
            logger.warning(f"Failed to parse title translations: {e}")
            return {}

    async def synthesize(self, bundle: EnrichedBundle) -> str:
        llm = get_llm(self.synthesis_model)

        messages = [
            SystemMessage(content=SYNTHESIS_SYSTEM_PROMPT.format(language=self.language)),
            HumanMessage(content=f"Context data:\n{build_synthesis_context(bundle)}"),
        ]

        logger.info(
            f"---SYNTHESIZING REPORT: {len(bundle.primary)} primary, {len(bundle.references)} references---"
        )
        try:
            response = await llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"Report synthesis failed: {e}")
            return SYNTHESIS_FAILED

        return _message_text(response).strip() or SYNTHESIS_FAILED
