"""Question types and the extracted-content shapes fed to the suggestion generator."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuestionType(str, Enum):
    BENEFITS = "benefits"
    AUDIENCE = "audience"
    COMPETITORS = "competitors"
    OBJECTIONS = "objections"
    KEYWORDS = "keywords"


QUESTION_TYPES = [q.value for q in QuestionType]


class WebsiteInfo(BaseModel):
    """Structured page data returned by the content extractor."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    meta_description: Optional[str] = Field(default=None, alias="metaDescription")
    main_headings: list[str] = Field(default_factory=list, alias="mainHeadings")
    main_content: str = Field(default="", alias="mainContent")

    @field_validator("title", "description", "main_content", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        # Clients send null for fields the extractor couldn't find
        return "" if value is None else value

    @field_validator("main_headings", mode="before")
    @classmethod
    def _null_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class SuggestionContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    website_info: Optional[WebsiteInfo] = Field(default=None, alias="websiteInfo")
