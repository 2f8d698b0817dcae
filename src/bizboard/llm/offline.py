# src/bizboard/llm/offline.py

from __future__ import annotations

from ..core.ports import ChatMessage


class OfflineLLMClient:
    """
    Stand-in LLM client used for demos when no external API is configured.

    Every call fails with the same configuration error the real client
    raises, so task generation takes its canned local path.
    """

    async def complete(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        *,
        temperature: float | None = None,
    ) -> str:
        raise RuntimeError("LLM API key is not set. Set BIZBOARD_OPENROUTER_API_KEY in your .env.")
