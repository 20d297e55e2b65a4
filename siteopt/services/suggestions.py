"""
Suggestion generator — turns extracted website content into exactly three
short suggestions per question type, or none at all.

One LLM call per request. No retries, no caching: asking twice may give
different answers. Partial batches (1 or 2 items) are never returned
because the selection UI renders a fixed triplet per category.
"""

import logging
from dataclasses import dataclass
from typing import Union

from ..core.errors import ExternalServiceError, ValidationError
from ..schemas.suggestions import QUESTION_TYPES, QuestionType, SuggestionContext
from .llm import chat_simple

logger = logging.getLogger(__name__)

SUGGESTION_COUNT = 3


@dataclass(frozen=True)
class GenerationParams:
    temperature: float
    max_tokens: int
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0


# ── Templates ────────────────────────────────────────────────────────

GENERIC_SYSTEM = (
    "You are a business analyst providing concise, specific insights. "
    "Return exactly 3 items, one per line, no numbers or additional text."
)

COMPETITOR_SYSTEM = (
    "You are an expert business analyst specializing in competitive market analysis. "
    "Your task is to identify direct competitors based on business model similarity, "
    "market overlap, and service offerings. Provide only the competitor names, "
    "one per line, no additional text."
)

# (request line, format line); the rest of the template is shared
CATEGORY_PROMPTS: dict[QuestionType, tuple[str, str]] = {
    QuestionType.BENEFITS: (
        "Analyze this business and list exactly 3 key benefits",
        "One benefit per line, be specific and concise",
    ),
    QuestionType.AUDIENCE: (
        "Identify exactly 3 primary target audience segments",
        "One audience segment per line, be specific",
    ),
    QuestionType.OBJECTIONS: (
        "List exactly 3 main customer objections or concerns",
        "One objection per line, be specific",
    ),
    QuestionType.KEYWORDS: (
        "Identify exactly 3 primary keyword groups for SEO",
        "One keyword group per line, be specific",
    ),
}

GENERIC_PARAMS = GenerationParams(temperature=0.5, max_tokens=150, presence_penalty=0.1, frequency_penalty=0.1)
# Company names only
COMPETITOR_PARAMS = GenerationParams(temperature=0.5, max_tokens=50, presence_penalty=0.1, frequency_penalty=0.1)


def _site_fields(context: SuggestionContext) -> tuple[str, str, str]:
    info = context.website_info
    if info is None:
        return "", "", ""
    return info.title or "", info.description or "", info.main_content or ""


def _competitor_prompt(context: SuggestionContext) -> str:
    title, description, content = _site_fields(context)
    return (
        "Analyze this business description and identify exactly 3 main direct competitors.\n\n"
        f"Business Description:\n{description}\n\n"
        f"Website: {context.url}\n"
        f"Industry Focus: {title}\n"
        f"Additional Context: {content}\n\n"
        "Requirements:\n"
        "1. List EXACTLY 3 direct competitors\n"
        "2. Each competitor must be a real company name\n"
        "3. Focus on companies offering similar core services\n"
        "4. Consider market size and target audience overlap\n"
        "5. Prioritize well-known companies in the same space\n\n"
        "Format: Return ONLY the company names, one per line, no numbers or additional text."
    )


def _category_prompt(question_type: QuestionType, context: SuggestionContext) -> str:
    _, description, content = _site_fields(context)
    request, fmt = CATEGORY_PROMPTS[question_type]
    return (
        f"{request}:\n\n"
        f"Business: {description}\n"
        f"Website: {context.url}\n"
        f"Context: {content}\n\n"
        f"Format: {fmt}."
    )


def build_request(
    question_type: QuestionType, context: SuggestionContext
) -> tuple[str, str, GenerationParams]:
    """Returns (system, prompt, params) for a question type."""
    if question_type == QuestionType.COMPETITORS:
        return COMPETITOR_SYSTEM, _competitor_prompt(context), COMPETITOR_PARAMS
    return GENERIC_SYSTEM, _category_prompt(question_type, context), GENERIC_PARAMS


def coerce_question_type(value: Union[str, QuestionType]) -> QuestionType:
    try:
        return QuestionType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid question type {value!r}; expected one of {', '.join(QUESTION_TYPES)}",
            "INVALID_QUESTION_TYPE",
        ) from None


# ── Parsing ──────────────────────────────────────────────────────────

def parse_suggestions(raw: str) -> list[str]:
    """
    Lines → trimmed, non-empty, period-free, first 3.
    Anything but exactly 3 survivors is discarded as a whole.
    """
    lines = [line.strip() for line in (raw or "").split("\n")]
    # A period usually means a sentence or a hedge, not a short answer
    kept = [line for line in lines if line and "." not in line][:SUGGESTION_COUNT]
    if len(kept) != SUGGESTION_COUNT:
        return []
    return kept


# ── Generation ───────────────────────────────────────────────────────

async def _call_generator(system: str, prompt: str, params: GenerationParams) -> str:
    try:
        return await chat_simple(
            prompt=prompt,
            system=system,
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            max_retries=0,
            allow_fallback=False,
            extra_params={
                "presence_penalty": params.presence_penalty,
                "frequency_penalty": params.frequency_penalty,
            },
        )
    except Exception as e:
        raise ExternalServiceError(f"Suggestion generation failed: {e}", "SUGGESTIONS_ERROR") from e


async def generate_suggestions(
    question_type: Union[str, QuestionType],
    context: SuggestionContext,
) -> list[str]:
    """
    Three suggestions for the question type, or [] when the model output
    doesn't yield exactly three valid lines or the call fails.
    Raises ValidationError only for an unknown question type.
    """
    qtype = coerce_question_type(question_type)
    system, prompt, params = build_request(qtype, context)

    try:
        raw = await _call_generator(system, prompt, params)
    except ExternalServiceError as e:
        logger.warning("Suggestions unavailable (%s, %s): %s", qtype.value, context.url, e.message)
        return []

    suggestions = parse_suggestions(raw)
    if not suggestions:
        logger.info("Discarded %s batch for %s (not exactly %d valid lines)", qtype.value, context.url, SUGGESTION_COUNT)
    return suggestions
