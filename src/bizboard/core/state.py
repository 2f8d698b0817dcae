# src/bizboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..data.changes import ChangeFeed
from ..data.gateway import DataGateway
from ..data.mock_store import MockStore
from ..tasks.generator import TaskGenerator
from ..tasks.lifecycle import TaskLifecycle
from .ports import LLMClient, TaskGeneratorPort


@dataclass(slots=True)
class StaticAuthProvider:
    """Auth port backed by a fixed user id (console runs, tests)."""

    user_id: str | None = None

    def current_user_id(self) -> str | None:
        return self.user_id


@dataclass
class AppState:
    """
    Global runtime state container.

    Holds the settings object and the wired services. Constructed by
    cli/bootstrap.py; tests build it directly with fakes.
    """

    settings: Any

    mock: MockStore
    changes: ChangeFeed
    gateway: DataGateway
    llm: LLMClient

    # Strict generator (used by the HTTP endpoint) and the one the dashboard
    # calls (the same object unless an endpoint URL is configured).
    generator: TaskGenerator
    dashboard_generator: TaskGeneratorPort
    lifecycle: TaskLifecycle
