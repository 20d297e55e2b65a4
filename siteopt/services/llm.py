"""
LLM client (OpenAI-compatible chat completions over httpx).

Features:
  - Retry with exponential backoff + jitter (handles 429, 500, 502, 503, 504)
  - Provider fallback (primary → fallback)
  - Both can be switched off per call for single-shot callers
  - Reusable client (connection pooling)
  - Structured logging
"""

import asyncio
import logging
import random
import time
from typing import Any, Optional

import httpx

from ..core.config import get_settings
from ..core.flags import get_flags

logger = logging.getLogger(__name__)

# ── Reusable client (connection pool) ────────────────────────────────

_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=10, read=60, write=30, pool=10),
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )
    return _client


async def close_client():
    """Close the shared HTTP client. Call on app shutdown."""
    global _client
    if _client and not _client.is_closed:
        await _client.aclose()
        _client = None


# ── Provider config ──────────────────────────────────────────────────

def _get_provider_config(provider: Optional[str] = None) -> tuple[str, str, str]:
    """Returns (base_url, api_key, default_model) for a provider."""
    settings = get_settings()
    p = (provider or get_flags().llm_provider).lower()

    if p == "gemini":
        return (
            "https://generativelanguage.googleapis.com/v1beta/openai",
            settings.gemini_api_key,
            settings.default_llm_model,
        )
    elif p == "aiml":
        return settings.aiml_base_url, settings.aiml_api_key, settings.default_llm_model
    else:  # openai (default)
        return settings.openai_base_url, settings.openai_api_key, settings.default_llm_model


# ── Retry logic ──────────────────────────────────────────────────────

RETRYABLE_STATUS = {429, 500, 502, 503, 504}
MAX_RETRIES = 3
BASE_DELAY = 1.0
MAX_DELAY = 16.0


async def _retry_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_retries: int = MAX_RETRIES,
    **kwargs,
) -> httpx.Response:
    """Execute request with exponential backoff + jitter. max_retries=0 → single attempt."""
    last_exc = None

    for attempt in range(max_retries + 1):
        is_last = attempt == max_retries
        try:
            resp = await client.request(method, url, **kwargs)

            if resp.status_code not in RETRYABLE_STATUS or is_last:
                if resp.status_code >= 400:
                    logger.error("LLM API error %d: %s", resp.status_code, resp.text[:500])
                resp.raise_for_status()
                return resp

            # Retryable error
            retry_after = resp.headers.get("retry-after")
            delay = float(retry_after) if retry_after else min(
                MAX_DELAY, BASE_DELAY * (2 ** attempt) + random.uniform(0, 1)
            )
            logger.warning(
                "LLM %d (attempt %d/%d) — retrying in %.1fs",
                resp.status_code, attempt + 1, max_retries + 1, delay,
            )
            last_exc = httpx.HTTPStatusError(
                f"{resp.status_code}", request=resp.request, response=resp
            )
            await asyncio.sleep(delay)

        except httpx.TimeoutException as e:
            if is_last:
                raise
            delay = min(MAX_DELAY, BASE_DELAY * (2 ** attempt) + random.uniform(0, 1))
            logger.warning(
                "LLM timeout (attempt %d/%d) — retrying in %.1fs",
                attempt + 1, max_retries + 1, delay,
            )
            last_exc = e
            await asyncio.sleep(delay)

        except httpx.HTTPStatusError:
            raise  # Non-retryable HTTP errors
        except Exception as e:
            if is_last:
                raise
            last_exc = e
            await asyncio.sleep(min(MAX_DELAY, BASE_DELAY * (2 ** attempt)))

    raise last_exc or RuntimeError("LLM request failed after retries")


# ── Main chat function ───────────────────────────────────────────────

async def chat(
    messages: list[dict],
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    provider: Optional[str] = None,
    max_retries: int = MAX_RETRIES,
    allow_fallback: bool = True,
    extra_params: Optional[dict] = None,
) -> dict:
    """
    Chat completion with retry + optional provider fallback.
    Returns the full API response as dict.
    """
    settings = get_settings()
    active_provider = (provider or get_flags().llm_provider).lower()
    base_url, api_key, default_model = _get_provider_config(provider)

    if not api_key:
        raise ValueError(
            f"No API key for LLM provider '{active_provider}'. "
            "Set OPENAI_API_KEY, GEMINI_API_KEY, or AIML_API_KEY."
        )

    payload: dict[str, Any] = {
        "model": model or default_model,
        "messages": messages,
        "temperature": temperature if temperature is not None else settings.default_llm_temperature,
        "max_tokens": max_tokens or settings.default_llm_max_tokens,
    }
    if extra_params:
        payload.update(extra_params)

    url = f"{base_url.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    start = time.monotonic()
    client = _get_client()

    try:
        resp = await _retry_request(
            client, "POST", url, max_retries=max_retries, json=payload, headers=headers,
        )
        data = resp.json()
        elapsed = time.monotonic() - start

        usage = data.get("usage") or {}
        logger.info(
            "LLM chat: %dms | in=%d out=%d tokens | model=%s",
            int(elapsed * 1000),
            usage.get("prompt_tokens", 0),
            usage.get("completion_tokens", 0),
            payload["model"],
        )
        return data

    except Exception as e:
        elapsed = time.monotonic() - start
        logger.error("LLM failed after %.1fs: %s", elapsed, e)

        fallback = _get_fallback_provider(active_provider) if allow_fallback else None
        if fallback and not provider:  # Only fallback once
            logger.info("Falling back to %s", fallback)
            return await chat(
                messages=messages, model=model, temperature=temperature,
                max_tokens=max_tokens, provider=fallback, max_retries=max_retries,
                allow_fallback=False, extra_params=extra_params,
            )
        raise


def _get_fallback_provider(primary: str) -> Optional[str]:
    """Get fallback provider. Returns None if no fallback available."""
    settings = get_settings()
    candidates = []
    if primary != "openai" and settings.openai_api_key:
        candidates.append("openai")
    if primary != "gemini" and settings.gemini_api_key:
        candidates.append("gemini")
    if primary != "aiml" and settings.aiml_api_key:
        candidates.append("aiml")
    return candidates[0] if candidates else None


def extract_content(response: dict) -> str:
    """Pull the assistant text out of a chat completion. Raises ValueError if missing."""
    try:
        content = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ValueError(f"Malformed LLM response: {e}") from e
    if not isinstance(content, str):
        raise ValueError("LLM response has no text content")
    return content


# ── Convenience functions ────────────────────────────────────────────

async def chat_simple(
    prompt: str,
    system: str = "",
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: int = 2048,
    **kwargs,
) -> str:
    """Send a prompt, get a string back."""
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    response = await chat(
        messages=messages, model=model,
        temperature=temperature, max_tokens=max_tokens, **kwargs,
    )
    return extract_content(response)
