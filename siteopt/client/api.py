"""
HTTP client for the Site Optimizer API.

Usage:
    async with SiteOptClient() as api:
        overview = await api.get_session("example.com")
        await api.upsert_step("example.com", UrlStep(url="https://example.com"))
"""

import logging
from typing import Any, Optional, Union

import httpx

from ..core.config import get_settings
from ..core.errors import AppError
from ..schemas.optimization import Agent, OptimizationOutcome
from ..schemas.session import SessionOverview, SessionSnapshot
from ..schemas.steps import StepPayload, dump_step
from ..schemas.suggestions import QuestionType, WebsiteInfo

logger = logging.getLogger(__name__)


class SiteOptClient:
    """Thin async wrapper over the /v1 endpoints. Unwraps the success envelope."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or get_settings().siteopt_api_url,
            timeout=timeout,
        )

    async def __aenter__(self) -> "SiteOptClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        resp = await self._client.request(method, path, **kwargs)
        try:
            body = resp.json()
        except ValueError:
            raise AppError(
                f"{method} {path} returned non-JSON (HTTP {resp.status_code})",
                "BAD_RESPONSE",
                status_code=resp.status_code,
            ) from None

        if not body.get("success"):
            error = body.get("error") or {}
            raise AppError(
                error.get("message", f"{method} {path} failed"),
                error.get("code", "UNKNOWN_ERROR"),
                status_code=resp.status_code,
            )
        return body.get("data")

    # ── Session ──────────────────────────────────────────────────────

    async def upsert_step(
        self, domain: str, step: Optional[StepPayload] = None
    ) -> Optional[SessionSnapshot]:
        payload: dict[str, Any] = {"domain": domain}
        if step is not None:
            payload["stepNumber"] = step.step_number
            payload["stepData"] = dump_step(step)
        data = await self._request("POST", "/v1/session", json=payload)
        return SessionSnapshot.model_validate(data) if data else None

    async def get_session(self, domain: str) -> SessionOverview:
        data = await self._request("GET", "/v1/session", params={"domain": domain})
        return SessionOverview.model_validate(data)

    async def finalize(
        self, domain: str, agent_id: str, outcome: OptimizationOutcome
    ) -> Optional[SessionSnapshot]:
        data = await self._request(
            "PUT",
            "/v1/session",
            json={
                "domain": domain,
                "agentId": agent_id,
                "suggestions": [s.model_dump(mode="json") for s in outcome.suggestions],
                "metrics": outcome.performance_metrics,
            },
        )
        return SessionSnapshot.model_validate(data) if data else None

    # ── Content ──────────────────────────────────────────────────────

    async def suggestions(
        self,
        question_type: Union[str, QuestionType],
        url: str,
        website_info: Optional[WebsiteInfo] = None,
    ) -> list[str]:
        payload: dict[str, Any] = {
            "questionType": QuestionType(question_type).value,
            "url": url,
        }
        if website_info is not None:
            payload["websiteInfo"] = website_info.model_dump(by_alias=True)
        data = await self._request("POST", "/v1/suggestions", json=payload)
        return list(data.get("suggestions", []))

    async def analyze(self, url: str) -> tuple[WebsiteInfo, str]:
        data = await self._request("POST", "/v1/analyze", json={"url": url})
        return WebsiteInfo.model_validate(data["websiteInfo"]), data.get("aiDescription", "")

    async def list_agents(self) -> list[Agent]:
        data = await self._request("GET", "/v1/agents")
        return [Agent.model_validate(a) for a in data]
