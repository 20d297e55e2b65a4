"""
Central feature flags. One file controls every external dependency.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the matching step is skipped. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── LLM Provider ─────────────────────────────────────────────────
    llm_provider: str = Field(default="openai", alias="FF_LLM_PROVIDER")
    # "openai" → Direct OpenAI (default). Needs OPENAI_API_KEY.
    # "gemini" → Google Gemini (OpenAI-compatible endpoint). Needs GEMINI_API_KEY.
    # "aiml"   → AIML API proxy. Needs AIML_API_KEY.

    # ── Site analysis ────────────────────────────────────────────────
    use_ai_description: bool = Field(default=True, alias="FF_USE_AI_DESCRIPTION")
    # ON  → /v1/analyze asks the LLM for a 2-sentence site description.
    # OFF → The extracted meta description is returned as-is.

    # ── Screenshots ──────────────────────────────────────────────────
    use_screenshot: bool = Field(default=True, alias="FF_USE_SCREENSHOT")
    # ON  → /v1/screenshot renders the page with headless Chromium (Playwright).
    # OFF → Endpoint answers SCREENSHOT_DISABLED. No browser is launched.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
