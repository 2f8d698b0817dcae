# tests/test_llm_client.py

from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest

from bizboard.llm.client import OpenRouterLLMClient, friendly_llm_error_message
from bizboard.llm.offline import OfflineLLMClient

_REQ = httpx.Request("POST", "https://openrouter.test/api/v1/chat/completions")


def _status_error(cls, code: int):
    return cls("error", response=httpx.Response(code, request=_REQ), body=None)


def _reply(text: str | None):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


class FakeCompletions:
    def __init__(self, outcomes: dict[str, list]) -> None:
        self.outcomes = outcomes
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes[kwargs["model"]].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _client(settings, outcomes: dict[str, list]) -> tuple[OpenRouterLLMClient, FakeCompletions]:
    completions = FakeCompletions(outcomes)
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenRouterLLMClient(settings, client=fake), completions


@pytest.mark.asyncio
async def test_falls_through_model_list(settings) -> None:
    client, completions = _client(
        settings,
        {
            "test/model-a": [_status_error(openai.NotFoundError, 404)],
            "test/model-b": [_reply("[]")],
        },
    )

    out = await client.complete([{"role": "user", "content": "hi"}], "sys", temperature=0.2)

    assert out == "[]"
    assert [c["model"] for c in completions.calls] == ["test/model-a", "test/model-b"]
    assert completions.calls[0]["messages"][0] == {"role": "system", "content": "sys"}
    assert completions.calls[1]["temperature"] == pytest.approx(0.2)


@pytest.mark.asyncio
async def test_unavailable_model_is_skipped_next_time(settings) -> None:
    client, completions = _client(
        settings,
        {
            "test/model-a": [_status_error(openai.NotFoundError, 404)],
            "test/model-b": [_reply("one"), _reply("two")],
        },
    )
    await client.complete([], "sys")
    assert await client.complete([], "sys") == "two"
    assert [c["model"] for c in completions.calls] == ["test/model-a", "test/model-b", "test/model-b"]


@pytest.mark.asyncio
async def test_auth_error_fails_fast(settings) -> None:
    client, completions = _client(
        settings,
        {"test/model-a": [_status_error(openai.AuthenticationError, 401)], "test/model-b": [_reply("x")]},
    )
    with pytest.raises(RuntimeError, match="authentication failed"):
        await client.complete([], "sys")
    assert len(completions.calls) == 1


@pytest.mark.asyncio
async def test_all_models_empty_or_rate_limited(settings) -> None:
    client, _ = _client(
        settings,
        {
            "test/model-a": [_reply("   ")],
            "test/model-b": [_status_error(openai.RateLimitError, 429)],
        },
    )
    with pytest.raises(RuntimeError, match="rate-limited"):
        await client.complete([], "sys")


def test_missing_key_is_a_configuration_error(settings) -> None:
    with pytest.raises(RuntimeError) as ei:
        OpenRouterLLMClient(settings)
    assert friendly_llm_error_message(ei.value).startswith("LLM is not configured (missing API key)")


@pytest.mark.asyncio
async def test_offline_client_always_fails() -> None:
    with pytest.raises(RuntimeError, match="API key is not set"):
        await OfflineLLMClient().complete([], "sys")
