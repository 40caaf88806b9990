# src/tasklane/llm/client.py

from __future__ import annotations

import logging
import time

import httpx
import openai
from openai import AsyncOpenAI

from ..config import Settings

logger = logging.getLogger(__name__)

BASE_SYSTEM_PROMPT = "You are a helpful task management assistant."

# Models that returned 404 are skipped until this monotonic time.
_BAD_MODEL_COOLDOWN_SECONDS = 3600.0


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    return isinstance(exc, openai.RateLimitError)


def _is_connection_error(exc: Exception) -> bool:
    # APITimeoutError subclasses APIConnectionError.
    return isinstance(exc, (openai.APIConnectionError, httpx.TimeoutException))


def _is_not_found_error(exc: Exception) -> bool:
    return isinstance(exc, openai.NotFoundError)


class OpenAIExtractionClient:
    """
    OpenAI-compatible chat-completions client used as the extraction service.

    Behavior:
    - Tries models in the order from settings (TASKLANE_LLM_MODELS).
    - 404 (model not available) -> remember and try next.
    - Rate limit / network issues / bad status -> try next.
    - Auth issues -> fail fast (no retries across models).
    - Empty content counts as a failure.

    Raises RuntimeError when no model produced output. Callers decide how to degrade.
    """

    def __init__(self, settings: Settings) -> None:
        api_key = (settings.llm_api_key or "").strip()
        base_url = (settings.llm_base_url or "").strip()
        if not api_key:
            raise RuntimeError("LLM API key is not set. Set TASKLANE_LLM_API_KEY in your .env.")
        if not base_url:
            raise RuntimeError("LLM base URL is not set. Set TASKLANE_LLM_BASE_URL in your .env.")

        self._models = [m.strip() for m in settings.llm_models if m and m.strip()]
        if not self._models:
            raise RuntimeError("LLM model list is empty. Set TASKLANE_LLM_MODELS in your .env.")

        self._headers = dict(settings.extra_headers or {})
        self._bad_models: dict[str, float] = {}

        timeout = httpx.Timeout(
            connect=5.0,
            read=settings.llm_timeout_seconds,
            write=10.0,
            pool=5.0,
        )
        # No SDK retries: a failure should fall through to the next model quickly.
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    async def complete(
        self,
        *,
        instruction: str,
        prompt: str,
        context: str | None = None,
    ) -> str:
        system_prompt = f"{BASE_SYSTEM_PROMPT} {instruction}".strip()
        if context:
            system_prompt = f"{context}\n{system_prompt}"

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]

        last_error: Exception | None = None
        now = time.monotonic()

        for model in self._models:
            retry_at = self._bad_models.get(model)
            if retry_at is not None and retry_at > now:
                continue

            t0 = time.monotonic()
            logger.info("LLM: trying model=%s", model)
            try:
                resp = await self._client.chat.completions.create(
                    model=model,
                    messages=messages,
                    temperature=0.2,
                    extra_headers=self._headers or None,
                )
                content = (resp.choices[0].message.content or "") if resp.choices else ""
                if content.strip():
                    logger.info("LLM: model=%s answered in %.2fs", model, time.monotonic() - t0)
                    return content
                last_error = RuntimeError(f"Model returned no content: {model}")
                logger.info("LLM: empty content from model=%s, trying next", model)

            except Exception as e:
                last_error = e

                if _is_auth_error(e):
                    raise RuntimeError(
                        "LLM authentication failed. Check your API key (TASKLANE_LLM_API_KEY)."
                    ) from e

                if _is_not_found_error(e):
                    self._bad_models[model] = time.monotonic() + _BAD_MODEL_COOLDOWN_SECONDS
                    logger.info("LLM: model not available (404): %s", model)
                    continue

                if _is_rate_limit_error(e):
                    logger.info("LLM: rate-limited on model=%s, trying next", model)
                    continue

                if _is_connection_error(e):
                    logger.info("LLM: network/timeout error on model=%s, trying next", model)
                    continue

                logger.info("LLM: error on model=%s (%s), trying next", model, e.__class__.__name__)
                continue

        if last_error is not None:
            if _is_rate_limit_error(last_error):
                raise RuntimeError("LLM is rate-limited. Try again later.") from last_error
            if _is_connection_error(last_error):
                raise RuntimeError("LLM network/timeout error.") from last_error
            raise RuntimeError("All LLM models failed.") from last_error

        raise RuntimeError("All LLM models failed.")

    async def aclose(self) -> None:
        await self._client.close()
