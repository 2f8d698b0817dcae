# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from bizboard.core.state import AppState, StaticAuthProvider
from bizboard.dashboard.session import DashboardSession, NotificationLog
from bizboard.data.changes import ChangeFeed
from bizboard.data.gateway import DataGateway
from bizboard.data.mock_store import MockStore
from bizboard.data.row_store import SqliteRowStore
from bizboard.tasks.generator import TaskGenerator
from bizboard.tasks.lifecycle import TaskLifecycle

from .fakes import FakeLLMClient


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="bizboard-test",
        log_level="DEBUG",
        # Paths (tmp per test run)
        data_dir=tmp_path / "data",
        store_db_path=tmp_path / "data" / "store.sqlite3",
        # Data
        remote_store_enabled=False,
        mock_latency_seconds=0.0,
        user_id="usr_1",
        # LLM (no key: offline client)
        openrouter_api_key=None,
        openrouter_base_url="https://openrouter.ai/api/v1",
        llm_models=["test/model-a", "test/model-b"],
        llm_temperature=0.7,
        llm_timeout_seconds=5.0,
        extra_headers={},
        # Endpoint
        generate_endpoint_url=None,
        api_host="127.0.0.1",
        api_port=8000,
    )


@pytest.fixture()
def mock() -> MockStore:
    return MockStore.seeded()


@pytest.fixture()
def changes() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture()
def row_store(tmp_path: Path) -> SqliteRowStore:
    return SqliteRowStore(tmp_path / "store.sqlite3")


@pytest.fixture()
def gateway(mock: MockStore, changes: ChangeFeed) -> DataGateway:
    """Gateway with no row store: every call answers from the demo data."""
    return DataGateway(
        remote=None,
        mock=mock,
        auth=StaticAuthProvider("usr_1"),
        changes=changes,
        mock_latency_seconds=0,
    )


@pytest.fixture()
def store_gateway(row_store: SqliteRowStore, mock: MockStore, changes: ChangeFeed) -> DataGateway:
    """Gateway backed by a real (empty) SQLite row store."""
    return DataGateway(
        remote=row_store,
        mock=mock,
        auth=StaticAuthProvider("usr_1"),
        changes=changes,
        mock_latency_seconds=0,
    )


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def state(settings: SimpleNamespace, mock: MockStore, changes: ChangeFeed, gateway: DataGateway, llm) -> AppState:
    """AppState wired with the demo-data gateway and a fake LLM."""
    generator = TaskGenerator(gateway, llm, temperature=settings.llm_temperature)
    return AppState(
        settings=settings,
        mock=mock,
        changes=changes,
        gateway=gateway,
        llm=llm,
        generator=generator,
        dashboard_generator=generator,
        lifecycle=TaskLifecycle(gateway),
    )


@pytest.fixture()
def session(state: AppState) -> Iterator[DashboardSession]:
    s = DashboardSession(
        gateway=state.gateway,
        generator=state.dashboard_generator,
        lifecycle=state.lifecycle,
        changes=state.changes,
        notifier=NotificationLog(),
    )
    yield s
    s.close()
