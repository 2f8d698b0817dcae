# src/bizboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the row store, LLM provider, auth and notification surfaces
swappable and makes testing easier.
"""

from dataclasses import dataclass
from typing import Any, Protocol

from .models import Task

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.

Row = dict[str, Any]
# Store-native row: snake_case keys, ISO timestamp strings.


class LLMClient(Protocol):
    """Chat completion client (OpenAI/OpenRouter-compatible)."""

    async def complete(
            self,
            messages: list[ChatMessage],
            system_prompt: str,
            *,
            temperature: float | None = None,
    ) -> str: ...


class RowStore(Protocol):
    """
    The managed row store (a plain CRUD surface).

    Implementations raise RowStoreError (data/row_store.py) when the store is
    unavailable or does not match the expected structure.
    """

    def select(self, table: str, **filters: Any) -> list[Row]: ...
    def insert(self, table: str, row: Row) -> Row: ...
    def update(self, table: str, row_id: str, changes: Row) -> Row | None: ...


class AuthProvider(Protocol):
    """Resolves who is signed in. Sessions themselves are managed elsewhere."""

    def current_user_id(self) -> str | None: ...


@dataclass(slots=True, frozen=True)
class Notification:
    """A transient, user-visible message (title + short description)."""

    title: str
    description: str = ""
    variant: str = "default"  # default | warning | destructive


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class TaskGeneratorPort(Protocol):
    async def generate(self, business_id: str) -> list[Task]: ...
