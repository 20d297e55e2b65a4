"""
Suggestions API.

POST /v1/suggestions — Three suggestions for one wizard question (or none)
"""

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import AppError, ValidationError
from ..schemas.envelope import Envelope, ok
from ..schemas.suggestions import SuggestionContext, WebsiteInfo
from ..services.suggestions import coerce_question_type, generate_suggestions

logger = logging.getLogger(__name__)

suggestions_router = APIRouter(prefix="/suggestions", tags=["suggestions"])


class SuggestionsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_type: Optional[str] = Field(default=None, alias="questionType")
    url: Optional[str] = None
    website_info: Optional[WebsiteInfo] = Field(default=None, alias="websiteInfo")


class SuggestionsData(BaseModel):
    suggestions: list[str] = []


@suggestions_router.post("", response_model=Envelope[SuggestionsData])
async def get_suggestions(request: SuggestionsRequest):
    """Generate suggestions. An empty list means 'ask the user to type their own'."""
    if not request.question_type or not request.url:
        raise ValidationError("Question type and URL are required", "MISSING_PARAMS")

    question_type = coerce_question_type(request.question_type)
    context = SuggestionContext(url=request.url, website_info=request.website_info)

    try:
        suggestions = await generate_suggestions(question_type, context)
    except AppError:
        raise
    except Exception as e:
        logger.error("Error getting suggestions: %s", e)
        raise AppError("Failed to get suggestions", "SUGGESTIONS_ERROR") from e

    return ok(SuggestionsData(suggestions=suggestions))
