"""Tests for services/pubmed/http.py - Resilient fetch layer."""
import asyncio

import httpx
import pytest


def _fetcher(handler, max_retries=3, sleeps=None):
    from evidence_miner.services.pubmed import ResilientFetcher

    async def record_sleep(seconds):
        if sleeps is not None:
            sleeps.append(seconds)

    return ResilientFetcher(
        base_url="https://eutils.test/entrez/eutils",
        max_retries=max_retries,
        backoff_seconds=1.0,
        transport=httpx.MockTransport(handler),
        sleep=record_sleep,
    )


class _Sequence:
    """Handler answering with the given statuses in order, then 200."""

    def __init__(self, *statuses):
        self.statuses = list(statuses)
        self.calls = 0

    def __call__(self, request):
        self.calls += 1
        if self.statuses:
            status = self.statuses.pop(0)
            if isinstance(status, Exception):
                raise status
            return httpx.Response(status)
        return httpx.Response(200, json={"ok": True})


class TestRetryPolicy:
    """Test which failures are retried and how often."""

    def test_success_needs_one_request(self):
        """A 200 on the first try should not retry."""
        handler = _Sequence()
        data = asyncio.run(_fetcher(handler).get_json("esearch.fcgi"))

        assert data == {"ok": True}
        assert handler.calls == 1

    def test_rate_limit_is_retried(self):
        """429 should be retried after the backoff interval."""
        sleeps = []
        handler = _Sequence(429, 429)
        data = asyncio.run(_fetcher(handler, sleeps=sleeps).get_json("esearch.fcgi"))

        assert data == {"ok": True}
        assert handler.calls == 3
        assert sleeps == [1.0, 1.0]

    def test_server_error_is_retried(self):
        """5xx statuses are transient."""
        handler = _Sequence(500, 503)
        asyncio.run(_fetcher(handler).get_json("esearch.fcgi"))

        assert handler.calls == 3

    def test_network_error_is_retried(self):
        """Connection failures are transient."""
        handler = _Sequence(httpx.ConnectError("boom"), httpx.ReadTimeout("slow"))
        data = asyncio.run(_fetcher(handler).get_json("esearch.fcgi"))

        assert data == {"ok": True}
        assert handler.calls == 3

    def test_client_error_fails_immediately(self):
        """Non-transient statuses must not be retried."""
        from evidence_miner.core.exceptions import TransportError

        handler = _Sequence(400)
        with pytest.raises(TransportError) as exc_info:
            asyncio.run(_fetcher(handler).get_json("esearch.fcgi"))

        assert handler.calls == 1
        assert exc_info.value.status_code == 400
        assert exc_info.value.attempts == 1

    def test_budget_exhaustion_raises_transport_error(self):
        """After max_retries retries the last status surfaces."""
        from evidence_miner.core.exceptions import TransportError

        handler = _Sequence(503, 503, 503, 503, 503)
        with pytest.raises(TransportError) as exc_info:
            asyncio.run(_fetcher(handler, max_retries=3).get_json("esearch.fcgi"))

        assert handler.calls == 4
        assert exc_info.value.status_code == 503
        assert exc_info.value.attempts == 4

    def test_network_exhaustion_has_no_status(self):
        """A persistent network failure is a TransportError without status."""
        from evidence_miner.core.exceptions import TransportError

        def handler(request):
            raise httpx.ConnectError("unreachable")

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(_fetcher(handler, max_retries=2).get_json("esearch.fcgi"))

        assert exc_info.value.status_code is None
        assert exc_info.value.attempts == 3

    def test_zero_retries(self):
        """max_retries=0 means a single attempt."""
        from evidence_miner.core.exceptions import TransportError

        handler = _Sequence(429)
        with pytest.raises(TransportError):
            asyncio.run(_fetcher(handler, max_retries=0).get_json("esearch.fcgi"))

        assert handler.calls == 1


class TestDecoding:
    """Test JSON/XML decoding helpers."""

    def test_invalid_json_raises_parse_error(self):
        from evidence_miner.core.exceptions import ParseError

        fetcher = _fetcher(lambda request: httpx.Response(200, text="<html>not json</html>"))
        with pytest.raises(ParseError):
            asyncio.run(fetcher.get_json("esummary.fcgi"))

    def test_invalid_xml_raises_parse_error(self):
        from evidence_miner.core.exceptions import ParseError

        fetcher = _fetcher(lambda request: httpx.Response(200, text="<PubmedArticleSet><unclosed>"))
        with pytest.raises(ParseError):
            asyncio.run(fetcher.get_xml("efetch.fcgi"))

    def test_get_xml_returns_root(self):
        fetcher = _fetcher(lambda request: httpx.Response(200, text="<PubmedArticleSet/>"))
        root = asyncio.run(fetcher.get_xml("efetch.fcgi"))

        assert root.tag == "PubmedArticleSet"


class TestRequestParameters:
    """Test URL and parameter handling."""

    def test_default_params_are_appended(self):
        """NCBI identification params go out with every request."""
        from evidence_miner.services.pubmed import ResilientFetcher

        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json={})

        fetcher = ResilientFetcher(
            base_url="https://eutils.test/entrez/eutils/",
            default_params={"tool": "evidence-miner", "email": "a@b.org"},
            transport=httpx.MockTransport(handler),
        )
        asyncio.run(fetcher.get_json("esearch.fcgi", params={"db": "pubmed"}))

        url = seen[0]
        assert url.path == "/entrez/eutils/esearch.fcgi"
        assert url.params["db"] == "pubmed"
        assert url.params["tool"] == "evidence-miner"
        assert url.params["email"] == "a@b.org"

    def test_repeated_params_are_kept(self):
        """Lists of tuples keep one value per repeated key."""
        seen = []

        def handler(request):
            seen.append(request.url.params.get_list("id"))
            return httpx.Response(200, json={})

        fetcher = _fetcher(handler)
        asyncio.run(fetcher.get_json("elink.fcgi", params=[("id", "1"), ("id", "2")]))

        assert seen == [["1", "2"]]

    def test_build_eutils_fetcher_sends_contact_email(self):
        from evidence_miner.services.pubmed import build_eutils_fetcher

        fetcher = build_eutils_fetcher()
        assert "email" in fetcher.default_params
        assert fetcher.default_params["tool"]
