"""Client for an OpenAI-compatible chat completion API."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Any, Final

import httpx

from mdcommands.config import (
    MDCOMMANDS_LLM_API_KEY,
    MDCOMMANDS_LLM_BACKOFF_S,
    MDCOMMANDS_LLM_BASE_URL,
    MDCOMMANDS_LLM_MAX_COMPLETION_TOKENS,
    MDCOMMANDS_LLM_MAX_INPUT_TOKENS,
    MDCOMMANDS_LLM_MAX_RETRIES,
    MDCOMMANDS_LLM_MODEL,
    MDCOMMANDS_LLM_TEMPERATURE,
    MDCOMMANDS_LLM_TIMEOUT_S,
    MDCOMMANDS_USER_AGENT,
)
from mdcommands.exceptions import LLMError, PromptTooLargeError
from mdcommands.tokenizer import count_tokens, format_token_count
from mdcommands.utils.logging_config import get_logger

logger = get_logger(__name__)

RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

SYSTEM_PROMPT: Final[str] = "You are a helpful assistant."


@dataclass(frozen=True)
class LLMSettings:
    """Connection and sampling settings for one model endpoint."""

    api_key: str = ""
    base_url: str = MDCOMMANDS_LLM_BASE_URL
    model: str = MDCOMMANDS_LLM_MODEL
    temperature: float = MDCOMMANDS_LLM_TEMPERATURE
    max_completion_tokens: int = MDCOMMANDS_LLM_MAX_COMPLETION_TOKENS
    max_input_tokens: int = MDCOMMANDS_LLM_MAX_INPUT_TOKENS
    timeout_s: float = MDCOMMANDS_LLM_TIMEOUT_S
    max_retries: int = MDCOMMANDS_LLM_MAX_RETRIES
    backoff_s: float = MDCOMMANDS_LLM_BACKOFF_S

    @classmethod
    def from_env(cls) -> LLMSettings:
        return cls(api_key=MDCOMMANDS_LLM_API_KEY)

    @property
    def is_reasoning_model(self) -> bool:
        """o1-family models reject system messages and sampling options."""
        return self.model.startswith("o1")


def build_payload(prompt: str, settings: LLMSettings) -> dict[str, Any]:
    """Build the chat completion request body for ``prompt``."""
    if settings.is_reasoning_model:
        return {
            "model": settings.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_completion_tokens": settings.max_completion_tokens,
        }
    return {
        "model": settings.model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "max_tokens": settings.max_completion_tokens,
        "temperature": settings.temperature,
    }


async def generate(
    prompt: str,
    *,
    request_id: str = "",
    settings: LLMSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Send ``prompt`` to the model and return its reply text.

    Args:
        prompt: Non-empty prompt text.
        request_id: Optional identifier attached to log records.
        settings: Endpoint settings. Defaults to ``LLMSettings.from_env()``.
        client: Optional httpx.AsyncClient for connection pooling. If not
            provided, a new client is created for this request.

    Returns:
        The stripped reply text.

    Raises:
        ValueError: If the prompt is empty.
        PromptTooLargeError: If the prompt exceeds ``max_input_tokens``.
        LLMError: If the API rejects the request, keeps failing after all
            retries, or returns an empty reply.
    """
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValueError("Invalid prompt: prompt must be a non-empty string")

    settings = settings or LLMSettings.from_env()
    if not settings.api_key:
        raise LLMError("No API key configured; set MDCOMMANDS_LLM_API_KEY or OPENAI_API_KEY")

    token_count = count_tokens(prompt)
    if token_count is not None and token_count > settings.max_input_tokens:
        raise PromptTooLargeError(
            f"Prompt with {token_count} tokens exceeds maximum input limit {settings.max_input_tokens}"
        )

    url = f"{settings.base_url.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {settings.api_key}",
        "User-Agent": MDCOMMANDS_USER_AGENT,
    }
    payload = build_payload(prompt, settings)
    log_extra = {"request_id": request_id, "model": settings.model}
    if token_count is not None:
        log_extra["prompt_tokens"] = format_token_count(token_count)
    last_exc: Exception | None = None

    async def do_request(http_client: httpx.AsyncClient) -> str:
        nonlocal last_exc

        for attempt in range(settings.max_retries + 1):
            try:
                response = await http_client.post(url, json=payload, headers=headers)

                if response.status_code in RETRY_STATUS_CODES:
                    last_exc = LLMError(f"HTTP {response.status_code} from {url}")
                elif response.is_error:
                    raise LLMError(f"HTTP {response.status_code} from {url}: {response.text[:500]}")
                else:
                    return _extract_reply(response.json())
            except (httpx.RequestError, ValueError) as exc:
                last_exc = exc

            if attempt < settings.max_retries:
                backoff = settings.backoff_s * (2**attempt)
                logger.warning(
                    "Model request failed, retrying",
                    extra={**log_extra, "attempt": attempt + 1, "backoff_s": backoff, "error": str(last_exc)},
                )
                await asyncio.sleep(backoff)

        raise LLMError(f"Model request to {url} failed: {last_exc}")

    logger.info("Calling model", extra=log_extra)

    if client is not None:
        reply = await do_request(client)
    else:
        async with httpx.AsyncClient(timeout=httpx.Timeout(settings.timeout_s)) as new_client:
            reply = await do_request(new_client)

    logger.debug("Model reply received", extra={**log_extra, "reply": reply})
    return reply


def _extract_reply(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise LLMError(f"Unexpected response shape from model API: {exc!r}") from exc
    reply = (content or "").strip()
    if not reply:
        raise LLMError("No reply received from model API")
    return reply


def extract_code_block(text: str, language: str) -> str | None:
    """Return the body of the first fenced code block tagged ``language``."""
    pattern = re.compile(r"```\s*" + re.escape(language) + r"\s*([\s\S]*?)```", re.IGNORECASE)
    match = pattern.search(text)
    if match and match.group(1):
        return match.group(1).strip()
    return None
