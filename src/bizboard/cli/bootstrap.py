# src/bizboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (row store, mock data,
  gateway, LLM, generator, lifecycle).
"""

from __future__ import annotations

import logging
import sqlite3

from ..config import get_settings
from ..core.ports import LLMClient, RowStore, TaskGeneratorPort
from ..core.state import AppState, StaticAuthProvider
from ..dashboard.session import DashboardSession, NotificationLog
from ..data.changes import ChangeFeed
from ..data.gateway import DataGateway
from ..data.mock_store import MockStore
from ..data.row_store import RowStoreError, SqliteRowStore
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient
from ..tasks.generator import TaskGenerator
from ..tasks.lifecycle import TaskLifecycle
from ..tasks.remote import RemoteTaskGenerator

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)


def _make_row_store(settings) -> RowStore | None:
    if not settings.remote_store_enabled:
        logger.info("Row store disabled; using demo data only.")
        return None
    try:
        return SqliteRowStore(settings.store_db_path)
    except (RowStoreError, OSError, sqlite3.Error):
        logger.exception("Row store unavailable at %s; using demo data only.", settings.store_db_path)
        return None


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    llm: LLMClient
    try:
        llm = OpenRouterLLMClient(settings)
    except Exception as e:
        # Demos / local runs without external services: generation uses canned tasks.
        logger.info("LLM disabled (%s); task generation will use canned tasks.", e)
        llm = OfflineLLMClient()

    mock = MockStore.seeded()
    changes = ChangeFeed()
    gateway = DataGateway(
        remote=_make_row_store(settings),
        mock=mock,
        auth=StaticAuthProvider(settings.user_id),
        changes=changes,
        mock_latency_seconds=settings.mock_latency_seconds,
    )

    generator = TaskGenerator(gateway, llm, temperature=settings.llm_temperature)
    dashboard_generator: TaskGeneratorPort = generator
    if settings.generate_endpoint_url:
        dashboard_generator = RemoteTaskGenerator(
            settings.generate_endpoint_url,
            gateway,
            user_id=settings.user_id,
            timeout_seconds=settings.llm_timeout_seconds,
        )

    return AppState(
        settings=settings,
        mock=mock,
        changes=changes,
        gateway=gateway,
        llm=llm,
        generator=generator,
        dashboard_generator=dashboard_generator,
        lifecycle=TaskLifecycle(gateway),
    )


def create_session(state: AppState) -> DashboardSession:
    return DashboardSession(
        gateway=state.gateway,
        generator=state.dashboard_generator,
        lifecycle=state.lifecycle,
        changes=state.changes,
        notifier=NotificationLog(),
    )
