"""Tests for the suggestion generator. The LLM call is mocked."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from siteopt.core.errors import ValidationError
from siteopt.schemas.suggestions import QuestionType, SuggestionContext, WebsiteInfo
from siteopt.services.suggestions import (
    COMPETITOR_PARAMS,
    COMPETITOR_SYSTEM,
    GENERIC_PARAMS,
    GENERIC_SYSTEM,
    build_request,
    generate_suggestions,
    parse_suggestions,
)

CONTEXT = SuggestionContext(
    url="https://example.com",
    website_info=WebsiteInfo(
        title="Example Shoes",
        description="Handmade leather shoes shipped worldwide",
        main_content="We craft boots and sneakers from vegetable-tanned leather.",
    ),
)


def _mock_llm(**kwargs):
    return patch("siteopt.services.suggestions.chat_simple", new=AsyncMock(**kwargs))


class TestParseSuggestions:
    def test_three_clean_lines_kept_in_order(self) -> None:
        assert parse_suggestions("Fast shipping\nLow prices\nFree returns") == [
            "Fast shipping", "Low prices", "Free returns",
        ]

    def test_two_valid_lines_gives_empty(self) -> None:
        assert parse_suggestions("Fast shipping\nLow prices") == []

    def test_lines_with_periods_dropped_before_counting(self) -> None:
        assert parse_suggestions("Alpha Inc.\nBeta Corp\nGamma LLC") == []

    def test_whitespace_and_blank_lines_ignored(self) -> None:
        raw = "\n  Fast shipping  \n\n Low prices\n\t\nFree returns \n"
        assert parse_suggestions(raw) == ["Fast shipping", "Low prices", "Free returns"]

    def test_more_than_three_capped_at_three(self) -> None:
        assert parse_suggestions("A\nB\nC\nD\nE") == ["A", "B", "C"]

    def test_period_lines_skipped_when_enough_remain(self) -> None:
        assert parse_suggestions("Maybe this. Or not\nA\nB\nC") == ["A", "B", "C"]

    @pytest.mark.parametrize("raw", ["", "   ", "\n\n", "Only one"])
    def test_degenerate_output_gives_empty(self, raw: str) -> None:
        assert parse_suggestions(raw) == []


class TestBuildRequest:
    def test_competitors_uses_strict_template(self) -> None:
        system, prompt, params = build_request(QuestionType.COMPETITORS, CONTEXT)
        assert system == COMPETITOR_SYSTEM
        assert params == COMPETITOR_PARAMS
        assert "real company name" in prompt
        assert "Industry Focus: Example Shoes" in prompt

    @pytest.mark.parametrize(
        "qtype, phrase",
        [
            (QuestionType.BENEFITS, "key benefits"),
            (QuestionType.AUDIENCE, "target audience segments"),
            (QuestionType.OBJECTIONS, "customer objections"),
            (QuestionType.KEYWORDS, "keyword groups for SEO"),
        ],
    )
    def test_other_types_share_template(self, qtype: QuestionType, phrase: str) -> None:
        system, prompt, params = build_request(qtype, CONTEXT)
        assert system == GENERIC_SYSTEM
        assert params == GENERIC_PARAMS
        assert phrase in prompt
        assert "Business: Handmade leather shoes shipped worldwide" in prompt
        assert "Website: https://example.com" in prompt

    def test_missing_website_info_renders_empty_fields(self) -> None:
        _, prompt, _ = build_request(QuestionType.BENEFITS, SuggestionContext(url="https://x.example"))
        assert "Business: \n" in prompt


class TestGenerateSuggestions:
    @pytest.mark.asyncio
    async def test_returns_three_lines_unmodified(self) -> None:
        with _mock_llm(return_value="Fast shipping\nLow prices\nFree returns") as llm:
            result = await generate_suggestions("benefits", CONTEXT)

        assert result == ["Fast shipping", "Low prices", "Free returns"]
        llm.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_single_call_without_retry_or_fallback(self) -> None:
        with _mock_llm(return_value="A\nB\nC") as llm:
            await generate_suggestions(QuestionType.AUDIENCE, CONTEXT)

        kwargs = llm.await_args.kwargs
        assert kwargs["max_retries"] == 0
        assert kwargs["allow_fallback"] is False
        assert kwargs["max_tokens"] == GENERIC_PARAMS.max_tokens
        assert kwargs["extra_params"]["presence_penalty"] == 0.1

    @pytest.mark.asyncio
    async def test_two_valid_lines_returns_empty(self) -> None:
        with _mock_llm(return_value="Parents\nTeachers"):
            assert await generate_suggestions("audience", CONTEXT) == []

    @pytest.mark.asyncio
    async def test_competitor_scenario_returns_empty(self) -> None:
        with _mock_llm(return_value="Alpha Inc.\nBeta Corp\nGamma LLC") as llm:
            result = await generate_suggestions("competitors", CONTEXT)

        assert result == []
        assert llm.await_args.kwargs["max_tokens"] == COMPETITOR_PARAMS.max_tokens

    @pytest.mark.asyncio
    async def test_competitors_with_three_names(self) -> None:
        with _mock_llm(return_value="Allbirds\nClarks\nDr Martens"):
            assert await generate_suggestions("competitors", CONTEXT) == [
                "Allbirds", "Clarks", "Dr Martens",
            ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("down"),
            httpx.ReadTimeout("slow"),
            ValueError("No API key"),
            ValueError("Malformed LLM response"),
        ],
    )
    async def test_call_failures_become_empty_list(self, error: Exception) -> None:
        with _mock_llm(side_effect=error):
            assert await generate_suggestions("keywords", CONTEXT) == []

    @pytest.mark.asyncio
    async def test_no_api_key_gives_empty_list_end_to_end(self) -> None:
        # Real llm.chat: raises on missing key, caught at the generator boundary
        assert await generate_suggestions("objections", CONTEXT) == []

    @pytest.mark.asyncio
    async def test_unknown_question_type_rejected(self) -> None:
        with _mock_llm(return_value="A\nB\nC") as llm:
            with pytest.raises(ValidationError) as exc:
                await generate_suggestions("pricing", CONTEXT)

        assert exc.value.code == "INVALID_QUESTION_TYPE"
        llm.assert_not_awaited()
