"""
Pytest fixtures and configuration for backend tests.

Provides an in-process fake of NCBI E-utilities (served through
httpx.MockTransport), a fake Synthesizer and sample documents.
"""
import os
import sys
from typing import Dict, List, Optional, Tuple
from xml.sax.saxutils import escape, quoteattr

import httpx
import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Settings are read at import time, so these must exist before any app import
os.environ.setdefault("OPENAI_API_KEY", "test-key-not-real")
os.environ["RATE_LIMIT_ENABLED"] = "false"

TEST_BASE_URL = "https://eutils.test/entrez/eutils"


class FakeEutils:
    """
    Minimal E-utilities server.

    Populate the dictionaries, then build a client with ``client()``.
    Every request is recorded in ``calls`` as (endpoint, QueryParams).
    """

    def __init__(self):
        self.calls: List[Tuple[str, httpx.QueryParams]] = []
        self.search_count = 0
        self.search_ids: List[str] = []
        self.summaries: Dict[str, dict] = {}
        self.abstracts: Dict[str, List[Tuple[Optional[str], str]]] = {}
        self.pmc_links: Dict[str, str] = {}
        self.pmc_bodies: Dict[str, Optional[str]] = {}
        self.references: Dict[str, List[str]] = {}
        self.fail: Dict[str, int] = {}
        self.raw: Dict[str, str] = {}

    # --- helpers for tests ---

    def add_document(self, pmid: str, title: str, abstract=None, authors=("Smith J", "Doe A")):
        self.summaries[pmid] = {
            "uid": pmid,
            "title": title,
            "authors": [{"name": n, "authtype": "Author"} for n in authors],
            "source": "Diabetes Care",
            "pubdate": "2024 Mar",
        }
        if abstract is not None:
            self.abstracts[pmid] = abstract

    def count(self, endpoint: str, **params) -> int:
        return sum(
            1 for name, query in self.calls
            if name == endpoint and all(query.get(k) == v for k, v in params.items())
        )

    def client(self, max_retries: int = 3):
        from evidence_miner.services.pubmed import PubMedClient
        return PubMedClient(fetcher=self.fetcher(max_retries=max_retries))

    def fetcher(self, max_retries: int = 3):
        from evidence_miner.services.pubmed import ResilientFetcher

        async def no_sleep(seconds):
            return None

        return ResilientFetcher(
            base_url=TEST_BASE_URL,
            max_retries=max_retries,
            backoff_seconds=0,
            transport=httpx.MockTransport(self.handler),
            sleep=no_sleep,
        )

    # --- request handling ---

    def handler(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.rsplit("/", 1)[-1]
        params = request.url.params
        self.calls.append((endpoint, params))

        if endpoint in self.fail:
            return httpx.Response(self.fail[endpoint])
        if endpoint in self.raw:
            return httpx.Response(200, text=self.raw[endpoint])

        if endpoint == "esearch.fcgi":
            return httpx.Response(200, json={"esearchresult": {
                "count": str(self.search_count),
                "retmax": str(len(self.search_ids)),
                "idlist": self.search_ids,
            }})
        if endpoint == "esummary.fcgi":
            return self._esummary(params["id"].split(","))
        if endpoint == "efetch.fcgi":
            if params["db"] == "pmc":
                return self._pmc(params["id"])
            return self._pubmed_xml(params["id"].split(","))
        if endpoint == "elink.fcgi":
            return self._elink(params["linkname"], params.get_list("id"))
        return httpx.Response(404)

    def _esummary(self, ids):
        result = {"uids": [i for i in ids if i in self.summaries]}
        for pmid in ids:
            if pmid in self.summaries:
                result[pmid] = self.summaries[pmid]
        return httpx.Response(200, json={"header": {"type": "esummary"}, "result": result})

    def _pubmed_xml(self, ids):
        articles = []
        for pmid in ids:
            if pmid not in self.summaries and pmid not in self.abstracts:
                continue
            segments = "".join(
                f"<AbstractText{' Label=' + quoteattr(label) if label else ''}>{escape(text)}</AbstractText>"
                for label, text in self.abstracts.get(pmid, [])
            )
            abstract = f"<Abstract>{segments}</Abstract>" if segments else ""
            articles.append(
                "<PubmedArticle><MedlineCitation>"
                f"<PMID Version=\"1\">{pmid}</PMID>"
                f"<Article><ArticleTitle>Title {pmid}</ArticleTitle>{abstract}</Article>"
                "</MedlineCitation></PubmedArticle>"
            )
        xml = f"<?xml version=\"1.0\"?><PubmedArticleSet>{''.join(articles)}</PubmedArticleSet>"
        return httpx.Response(200, text=xml)

    def _pmc(self, pmcid):
        body = self.pmc_bodies.get(pmcid)
        body_xml = f"<body><sec><title>Introduction</title><p>{escape(body)}</p></sec></body>" if body else ""
        xml = (
            "<?xml version=\"1.0\"?><pmc-articleset><article>"
            f"<front><article-meta><article-id pub-id-type=\"pmc\">{pmcid}</article-id></article-meta></front>"
            f"{body_xml}</article></pmc-articleset>"
        )
        return httpx.Response(200, text=xml)

    def _elink(self, linkname, ids):
        linksets = []
        if linkname == "pubmed_pmc":
            pmid = ids[0]
            linkset = {"dbfrom": "pubmed", "ids": [pmid]}
            if pmid in self.pmc_links:
                linkset["linksetdbs"] = [{
                    "dbto": "pmc", "linkname": "pubmed_pmc", "links": [self.pmc_links[pmid]]
                }]
            linksets.append(linkset)
        else:
            for pmid in ids:
                linkset = {"dbfrom": "pubmed", "ids": [pmid]}
                if self.references.get(pmid):
                    linkset["linksetdbs"] = [{
                        "dbto": "pubmed", "linkname": linkname, "links": self.references[pmid]
                    }]
                linksets.append(linkset)
        return httpx.Response(200, json={"header": {"type": "elink"}, "linksets": linksets})


class FakeSynthesizer:
    """Records calls and returns canned output; never touches a network."""

    def __init__(self, report: str = "Synthesized report", translations=None, fail_with=None,
                 translate_fail_with=None, analyze_fail_with=None):
        self.report = report
        self.translations = translations or {}
        self.fail_with = fail_with
        self.translate_fail_with = translate_fail_with
        self.analyze_fail_with = analyze_fail_with
        self.bundles = []
        self.translate_calls = []

    async def analyze(self, text):
        if self.analyze_fail_with is not None:
            raise self.analyze_fail_with
        from evidence_miner.schemas.documents import AnalysisResult
        terms = ["Diabetes Mellitus", "Metformin", "Insulin Resistance", "Glucose",
                 "HbA1c", "Obesity", "Cardiovascular Risk"]
        return AnalysisResult(is_japanese=False, english_text=text, mesh_terms=terms)

    async def translate_titles(self, titles):
        self.translate_calls.append(dict(titles))
        if self.translate_fail_with is not None:
            raise self.translate_fail_with
        return {pmid: self.translations[pmid] for pmid in titles if pmid in self.translations}

    async def synthesize(self, bundle):
        if self.fail_with is not None:
            raise self.fail_with
        self.bundles.append(bundle)
        return self.report


@pytest.fixture
def eutils():
    """Fresh fake E-utilities server."""
    return FakeEutils()


@pytest.fixture
def fake_synthesizer():
    return FakeSynthesizer(translations={"10000001": "メトホルミンと糖尿病"})


@pytest.fixture
def failing_synthesizer():
    return FakeSynthesizer(fail_with=RuntimeError("backend down"))


@pytest.fixture
def populated_eutils(eutils):
    """
    Three diabetes papers. 10000001 has a PMC copy, 10000002 does not,
    10000003 has no abstract. Each cites a few references.
    """
    eutils.search_count = 1523
    eutils.search_ids = ["10000001", "10000002", "10000003"]
    eutils.add_document("10000001", "Metformin and type 2 diabetes", [
        ("BACKGROUND", "Metformin is first-line therapy."),
        ("RESULTS", "HbA1c fell by 1.1%."),
    ])
    eutils.add_document("10000002", "Metformin beyond glucose", [(None, "An unstructured abstract.")])
    eutils.add_document("10000003", "A letter without abstract", [])
    eutils.pmc_links["10000001"] = "9000001"
    eutils.pmc_bodies["PMC9000001"] = "Metformin   lowers\n hepatic glucose output."
    eutils.references = {
        "10000001": ["20000001", "20000002", "20000003", "20000004"],
        "10000002": ["20000002", "20000005"],
    }
    for ref in ["20000001", "20000002", "20000003", "20000005"]:
        eutils.add_document(ref, f"Reference {ref}", [(None, f"Abstract of {ref}.")])
    return eutils


@pytest.fixture
def sample_document():
    from evidence_miner.schemas.documents import DocumentRecord
    return DocumentRecord(
        pmid="12345678",
        title="Metformin extends healthspan in mice",
        authors="Smith J, Doe A",
        journal="Nature",
        pubdate="2023 Jan",
    )


@pytest.fixture
def test_client(populated_eutils, fake_synthesizer):
    """Test client with the review session wired to the fakes."""
    from fastapi.testclient import TestClient
    from evidence_miner.main import app
    from evidence_miner.core.dependencies import get_review_session
    from evidence_miner.services.review import ReviewSession

    session = ReviewSession(populated_eutils.client(), fake_synthesizer)
    app.dependency_overrides[get_review_session] = lambda: session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def offline_synthesizer():
    """Language backend that is unreachable for analysis and translation."""
    return FakeSynthesizer(
        translate_fail_with=RuntimeError("connection refused"),
        analyze_fail_with=RuntimeError("upstream 503: internal provider trace"),
    )


@pytest.fixture
def offline_client(populated_eutils, offline_synthesizer):
    """Test client whose session uses the unreachable language backend."""
    from fastapi.testclient import TestClient
    from evidence_miner.main import app
    from evidence_miner.core.dependencies import get_review_session
    from evidence_miner.services.review import ReviewSession

    session = ReviewSession(populated_eutils.client(), offline_synthesizer)
    app.dependency_overrides[get_review_session] = lambda: session

    with TestClient(app) as client:
        yield client, session

    app.dependency_overrides.clear()
