# src/bizboard/llm/client.py

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import openai
from openai import AsyncOpenAI

from ..core.ports import ChatMessage

logger = logging.getLogger(__name__)


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.APIConnectionError, openai.APITimeoutError, httpx.TimeoutException)):
        return True
    return exc.__class__.__name__ in {"Timeout", "ConnectTimeout", "ReadTimeout", "WriteTimeout"}


def _is_not_found_error(exc: Exception) -> bool:
    # OpenAI-compatible SDK uses NotFoundError for HTTP 404 (unknown model).
    return isinstance(exc, openai.NotFoundError)


def friendly_llm_error_message(err: Exception) -> str:
    msg = str(err).strip() or "LLM error."
    if "LLM API key is not set" in msg:
        return "LLM is not configured (missing API key). Set BIZBOARD_OPENROUTER_API_KEY in .env."
    if "LLM model list is empty" in msg:
        return "LLM is not configured (no models). Set BIZBOARD_LLM_MODELS in .env."
    if "LLM base URL is not set" in msg:
        return "LLM is not configured (missing base URL). Set BIZBOARD_OPENROUTER_BASE_URL in .env."
    return msg


class OpenRouterLLMClient:
    """
    Chat-completion client for OpenRouter (or any OpenAI-compatible API).

    Behavior:
    - Tries models in the order from settings (BIZBOARD_LLM_MODELS).
    - 404 (model not available) -> remember for an hour, try next.
    - Rate limit / network issues -> try next.
    - Auth issues -> fail fast (no retries across models).
    - Raises RuntimeError when every model failed.
    """

    def __init__(self, settings: Any, *, client: AsyncOpenAI | None = None) -> None:
        api_key = getattr(settings, "openrouter_api_key", None)
        base_url = getattr(settings, "openrouter_base_url", "") or ""

        if client is None:
            if not api_key or not str(api_key).strip():
                raise RuntimeError("LLM API key is not set. Set BIZBOARD_OPENROUTER_API_KEY in your .env.")
            if not base_url.strip():
                raise RuntimeError("LLM base URL is not set. Set BIZBOARD_OPENROUTER_BASE_URL in your .env.")

            timeout_s = float(getattr(settings, "llm_timeout_seconds", 60.0))
            # No SDK retries: we fall through the model list instead.
            client = AsyncOpenAI(
                base_url=str(base_url),
                api_key=str(api_key),
                timeout=httpx.Timeout(timeout_s, connect=5.0),
                max_retries=0,
            )

        self._client = client
        self._models: list[str] = [m.strip() for m in (getattr(settings, "llm_models", None) or []) if m.strip()]
        self._headers: dict[str, str] = dict(getattr(settings, "extra_headers", None) or {})
        self._default_temperature = float(getattr(settings, "llm_temperature", 0.7))
        self._bad_models: dict[str, float] = {}  # model -> retry_at (monotonic)

    @property
    def models(self) -> list[str]:
        return list(self._models)

    async def complete(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        *,
        temperature: float | None = None,
    ) -> str:
        if not self._models:
            raise RuntimeError("LLM model list is empty. Set BIZBOARD_LLM_MODELS in your .env.")

        temp = self._default_temperature if temperature is None else float(temperature)
        payload = [{"role": "system", "content": system_prompt}, *messages]
        last_error: Exception | None = None
        now = time.monotonic()

        for model in self._models:
            retry_at = self._bad_models.get(model)
            if retry_at is not None and retry_at > now:
                continue

            logger.info("LLM: trying model=%s temperature=%.2f", model, temp)
            t0 = time.monotonic()
            try:
                response = await self._client.chat.completions.create(
                    model=model,
                    messages=payload,  # type: ignore[arg-type]
                    temperature=temp,
                    extra_headers=self._headers or None,
                )
            except Exception as e:
                last_error = e

                if _is_auth_error(e):
                    raise RuntimeError(
                        "LLM authentication failed. Check your API key (BIZBOARD_OPENROUTER_API_KEY)."
                    ) from e

                if _is_not_found_error(e):
                    self._bad_models[model] = time.monotonic() + 3600.0
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

            content = ""
            try:
                content = response.choices[0].message.content or ""
            except (AttributeError, IndexError):
                content = ""

            if content.strip():
                logger.info("LLM: response from model=%s (%.2fs, %d chars)", model, time.monotonic() - t0, len(content))
                return content

            last_error = RuntimeError(f"Model returned no content: {model}")
            logger.info("LLM: empty response from model=%s, trying next", model)

        if last_error is not None:
            if _is_rate_limit_error(last_error):
                raise RuntimeError("LLM is rate-limited. Try again later.") from last_error
            if _is_connection_error(last_error):
                raise RuntimeError("LLM network/timeout error. Try again later or change models.") from last_error
            raise RuntimeError("All LLM models failed.") from last_error

        raise RuntimeError("All LLM models failed.")
