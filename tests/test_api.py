"""HTTP-level tests: envelopes, error codes and status codes."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from siteopt.core.errors import ExternalServiceError
from siteopt.core.flags import get_flags
from siteopt.schemas.suggestions import WebsiteInfo


def _error(resp) -> tuple[int, str]:
    body = resp.json()
    assert body["success"] is False
    return resp.status_code, body["error"]["code"]


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, api_client) -> None:
        resp = await api_client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "service": "siteopt"}


class TestSessionEndpoints:
    @pytest.mark.asyncio
    async def test_post_requires_domain(self, api_client) -> None:
        resp = await api_client.post("/v1/session", json={"stepNumber": 1, "stepData": {"url": "x"}})
        assert _error(resp) == (400, "MISSING_DOMAIN")

    @pytest.mark.asyncio
    async def test_post_without_step_creates_session(self, api_client) -> None:
        resp = await api_client.post("/v1/session", json={"domain": "example.com"})

        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is True
        assert body["data"]["domain"] == "example.com"
        assert body["data"]["steps"] == []

    @pytest.mark.asyncio
    async def test_post_upserts_step(self, api_client) -> None:
        await api_client.post("/v1/session", json={
            "domain": "example.com", "stepNumber": 3, "stepData": {"siteDescription": "A"},
        })
        resp = await api_client.post("/v1/session", json={
            "domain": "example.com", "stepNumber": 3, "stepData": {"siteDescription": "B"},
        })

        steps = resp.json()["data"]["steps"]
        assert steps == [{"stepNumber": 3, "data": {"siteDescription": "B"}}]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"stepNumber": 9, "stepData": {"url": "https://example.com"}},
            {"stepNumber": 1, "stepData": {"agentId": "max"}},
            {"stepNumber": 1},
            {"stepData": {"url": "https://example.com"}},
            {"stepNumber": "1", "stepData": {"url": "https://example.com"}},
        ],
    )
    async def test_post_invalid_step(self, api_client, payload: dict) -> None:
        resp = await api_client.post("/v1/session", json={"domain": "example.com", **payload})
        assert _error(resp) == (400, "INVALID_STEP")

    @pytest.mark.asyncio
    async def test_malformed_body(self, api_client) -> None:
        resp = await api_client.post("/v1/session", json={"domain": ["example.com"]})
        assert _error(resp) == (400, "INVALID_REQUEST")

    @pytest.mark.asyncio
    async def test_get_requires_domain(self, api_client) -> None:
        resp = await api_client.get("/v1/session")
        assert _error(resp) == (400, "MISSING_DOMAIN")

    @pytest.mark.asyncio
    async def test_get_unknown_domain(self, api_client) -> None:
        resp = await api_client.get("/v1/session", params={"domain": "nowhere.example"})
        assert resp.json() == {"success": True, "data": {"currentSession": None, "history": []}}

    @pytest.mark.asyncio
    async def test_get_overview(self, api_client) -> None:
        await api_client.post("/v1/session", json={
            "domain": "example.com", "stepNumber": 2, "stepData": {"agentId": "max"},
        })

        data = (await api_client.get("/v1/session", params={"domain": "Example.com"})).json()["data"]

        assert data["currentSession"]["steps"][0] == {"stepNumber": 2, "data": {"agentId": "max"}}
        assert data["currentSession"]["optimizationResult"] is None
        assert len(data["history"]) == 1

    @pytest.mark.asyncio
    async def test_put_requires_agent(self, api_client) -> None:
        resp = await api_client.put("/v1/session", json={"domain": "example.com"})
        assert _error(resp) == (400, "MISSING_PARAMS")

    @pytest.mark.asyncio
    async def test_put_unknown_domain_writes_nothing(self, api_client, count_results) -> None:
        resp = await api_client.put("/v1/session", json={
            "domain": "nowhere.example", "agentId": "max", "suggestions": [], "metrics": {},
        })

        assert _error(resp) == (404, "SESSION_NOT_FOUND")
        assert await count_results() == 0

    @pytest.mark.asyncio
    async def test_put_appends_result(self, api_client, count_results) -> None:
        await api_client.post("/v1/session", json={"domain": "example.com"})
        resp = await api_client.put("/v1/session", json={
            "domain": "example.com",
            "agentId": "liv",
            "suggestions": [{
                "type": "conversion", "title": "Smart CTAs", "description": "d",
                "impact": "high", "implementation": "i",
            }],
            "metrics": {"conversion": 95},
        })

        result = resp.json()["data"]["optimizationResult"]
        assert result["agentId"] == "liv"
        assert result["metrics"] == {"conversion": 95}
        assert result["suggestions"][0]["title"] == "Smart CTAs"
        assert await count_results() == 1

    @pytest.mark.asyncio
    async def test_put_missing_domain_checked_before_result_shape(self, api_client) -> None:
        resp = await api_client.put("/v1/session", json={
            "agentId": "max", "suggestions": [{"title": "no impact"}], "metrics": "oops",
        })
        assert _error(resp) == (400, "MISSING_PARAMS")

    @pytest.mark.asyncio
    async def test_put_malformed_result(self, api_client, count_results) -> None:
        await api_client.post("/v1/session", json={"domain": "example.com"})
        resp = await api_client.put("/v1/session", json={
            "domain": "example.com", "agentId": "max", "suggestions": [{"title": "no impact"}],
        })

        assert _error(resp) == (400, "INVALID_REQUEST")
        assert await count_results() == 0


class TestSuggestionsEndpoint:
    @pytest.mark.asyncio
    async def test_requires_params(self, api_client) -> None:
        resp = await api_client.post("/v1/suggestions", json={"questionType": "benefits"})
        assert _error(resp) == (400, "MISSING_PARAMS")

    @pytest.mark.asyncio
    async def test_unknown_question_type(self, api_client) -> None:
        resp = await api_client.post("/v1/suggestions", json={
            "questionType": "pricing", "url": "https://example.com",
        })
        assert _error(resp) == (400, "INVALID_QUESTION_TYPE")

    @pytest.mark.asyncio
    async def test_returns_suggestions(self, api_client) -> None:
        with patch(
            "siteopt.services.suggestions.chat_simple",
            new=AsyncMock(return_value="Fast shipping\nLow prices\nFree returns"),
        ):
            resp = await api_client.post("/v1/suggestions", json={
                "questionType": "benefits",
                "url": "https://example.com",
                "websiteInfo": {"title": "Shop", "description": "A shop", "mainContent": "..."},
            })

        assert resp.json() == {
            "success": True,
            "data": {"suggestions": ["Fast shipping", "Low prices", "Free returns"]},
        }

    @pytest.mark.asyncio
    async def test_generator_failure_is_empty_success(self, api_client) -> None:
        # No API key configured: the generator degrades to []
        resp = await api_client.post("/v1/suggestions", json={
            "questionType": "keywords", "url": "https://example.com",
        })
        assert resp.json() == {"success": True, "data": {"suggestions": []}}

    @pytest.mark.asyncio
    async def test_null_website_fields_accepted(self, api_client) -> None:
        llm = AsyncMock(return_value="A\nB\nC")
        with patch("siteopt.services.suggestions.chat_simple", new=llm):
            resp = await api_client.post("/v1/suggestions", json={
                "questionType": "benefits",
                "url": "https://example.com",
                "websiteInfo": {
                    "title": None, "description": None, "metaDescription": None,
                    "mainHeadings": None, "mainContent": None,
                },
            })

        assert resp.json() == {"success": True, "data": {"suggestions": ["A", "B", "C"]}}
        assert "Business: \n" in llm.await_args.kwargs["prompt"]


class TestSiteEndpoints:
    @pytest.mark.asyncio
    async def test_analyze_requires_url(self, api_client) -> None:
        resp = await api_client.post("/v1/analyze", json={})
        assert _error(resp) == (400, "MISSING_URL")

    @pytest.mark.asyncio
    async def test_analyze(self, api_client) -> None:
        info = WebsiteInfo(title="Shop", description="Meta", main_headings=["Welcome"])
        with patch(
            "siteopt.api.site.analyze_website",
            new=AsyncMock(return_value=(info, "A friendly shop.")),
        ):
            resp = await api_client.post("/v1/analyze", json={"url": "https://example.com"})

        data = resp.json()["data"]
        assert data["aiDescription"] == "A friendly shop."
        assert data["websiteInfo"]["mainHeadings"] == ["Welcome"]

    @pytest.mark.asyncio
    async def test_analyze_failure(self, api_client) -> None:
        with patch(
            "siteopt.api.site.analyze_website",
            new=AsyncMock(side_effect=ExternalServiceError("Failed to analyze website", "ANALYSIS_FAILED")),
        ):
            resp = await api_client.post("/v1/analyze", json={"url": "https://example.com"})

        assert _error(resp) == (502, "ANALYSIS_FAILED")

    @pytest.mark.asyncio
    async def test_screenshot_disabled(self, api_client, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FF_USE_SCREENSHOT", "false")
        get_flags.cache_clear()

        resp = await api_client.post("/v1/screenshot", json={"url": "https://example.com"})
        assert _error(resp) == (503, "SCREENSHOT_DISABLED")

    @pytest.mark.asyncio
    async def test_screenshot_requires_url(self, api_client) -> None:
        resp = await api_client.post("/v1/screenshot", json={"url": " "})
        assert _error(resp) == (400, "MISSING_URL")


class TestAgentsEndpoint:
    @pytest.mark.asyncio
    async def test_lists_catalog(self, api_client) -> None:
        data = (await api_client.get("/v1/agents")).json()["data"]

        assert [a["id"] for a in data] == ["liv", "max", "aya"]
        assert data[0]["imageUrl"] == "/agents/liv.jpg"
        assert data[2]["status"] == "beta"
