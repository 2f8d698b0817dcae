# src/bizboard/data/gateway.py

"""
Data gateway.

One async operation per entity and query shape. Each operation:
1. tries the row store (blocking, so it runs in a worker thread),
2. on failure falls back to the in-process MockStore after a short simulated
   latency,
3. returns normalized domain records wrapped in `Fetched`, tagged with where
   they came from.

Store failures never propagate to callers: they see the mock result plus
`Fetched.degraded == True` and can decide whether to warn the user.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

from ..core.models import (
    Business,
    BusinessSize,
    Task,
    TaskCategory,
    TaskFrequency,
    TaskPriority,
    TaskStatus,
    Tip,
    User,
)
from ..core.ports import AuthProvider, Row, RowStore
from .changes import ChangeEvent, ChangeFeed, ChangeKind
from .mock_store import MockStore
from .row_store import DuplicateRowError, RowStoreError
from .rows import (
    business_from_row,
    format_ts,
    task_from_row,
    tip_from_row,
    user_from_row,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DataSource(str, Enum):
    REMOTE = "remote"
    MOCK = "mock"


@dataclass(slots=True, frozen=True)
class Fetched(Generic[T]):
    """Result of a gateway call: the value plus where it came from."""

    value: T
    source: DataSource = DataSource.REMOTE
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.source == DataSource.MOCK


class _RemoteUnavailable(Exception):
    pass


class DataGateway:
    def __init__(
        self,
        *,
        remote: RowStore | None,
        mock: MockStore,
        auth: AuthProvider | None = None,
        changes: ChangeFeed | None = None,
        mock_latency_seconds: float = 0.3,
    ) -> None:
        self._remote = remote
        self._mock = mock
        self._auth = auth
        self._changes = changes
        self._latency = max(0.0, float(mock_latency_seconds))

    # ---- low-level helpers ----

    async def _remote_call(self, fn: Callable[[RowStore], T]) -> T:
        """Run a blocking row-store call off the event loop; normalize failures."""
        remote = self._remote
        if remote is None:
            raise _RemoteUnavailable("Row store is not configured")
        try:
            return await asyncio.to_thread(fn, remote)
        except DuplicateRowError:
            raise
        except RowStoreError as e:
            raise _RemoteUnavailable(str(e)) from e
        except Exception as e:
            # Wrong row shape, driver bug, etc.: treat like an unavailable store.
            raise _RemoteUnavailable(f"{e.__class__.__name__}: {e}") from e

    async def _mock_delay(self) -> None:
        if self._latency > 0:
            await asyncio.sleep(self._latency)

    async def _fallback(self, op: str, err: Exception, fn: Callable[[], T]) -> Fetched[T]:
        if self._remote is not None:
            logger.warning("Gateway %s: row store failed (%s); using mock data", op, err)
        else:
            logger.debug("Gateway %s: no row store; using mock data", op)
        await self._mock_delay()
        return Fetched(fn(), DataSource.MOCK, str(err))

    def _publish(self, kind: ChangeKind, task: Task) -> None:
        if self._changes is None:
            return
        self._changes.publish(
            ChangeEvent(table="tasks", kind=kind, business_id=task.business_id, row_id=task.id)
        )

    # ---- users ----

    async def get_current_user(self) -> Fetched[User | None]:
        user_id = self._auth.current_user_id() if self._auth is not None else None
        if not user_id:
            logger.debug("Gateway get_current_user: no signed-in user; using demo user")
            await self._mock_delay()
            return Fetched(self._mock.get_user(None), DataSource.MOCK, "No signed-in user")
        try:
            rows = await self._remote_call(lambda r: r.select("profiles", id=user_id))
            if rows:
                return Fetched(user_from_row(rows[0]))
            raise _RemoteUnavailable(f"Profile not found: {user_id}")
        except _RemoteUnavailable as e:
            return await self._fallback("get_current_user", e, lambda: self._mock.get_user(user_id))

    # ---- businesses ----

    async def get_businesses(self, user_id: str) -> Fetched[list[Business]]:
        try:
            rows = await self._remote_call(lambda r: r.select("businesses", user_id=user_id))
            return Fetched([business_from_row(row) for row in rows])
        except _RemoteUnavailable as e:
            return await self._fallback("get_businesses", e, lambda: self._mock.get_businesses(user_id))

    async def get_business(self, business_id: str) -> Fetched[Business | None]:
        try:
            rows = await self._remote_call(lambda r: r.select("businesses", id=business_id))
            if rows:
                return Fetched(business_from_row(rows[0]))
            raise _RemoteUnavailable(f"Business not found in store: {business_id}")
        except _RemoteUnavailable as e:
            return await self._fallback("get_business", e, lambda: self._mock.get_business(business_id))

    async def create_business(
        self,
        *,
        user_id: str,
        name: str,
        type: str,
        location: str,
        industry: str,
        size: BusinessSize | str,
        description: str,
        founded_year: int | None = None,
        website: str | None = None,
        logo_url: str | None = None,
    ) -> Fetched[Business]:
        row: Row = {
            "user_id": user_id,
            "name": name,
            "type": type,
            "location": location,
            "industry": industry,
            "size": BusinessSize.from_raw(size).value,
            "description": description,
            "founded_year": founded_year,
            "website": website or None,
            "logo_url": logo_url or None,
        }
        try:
            inserted = await self._remote_call(lambda r: r.insert("businesses", row))
            business = business_from_row(inserted)
            logger.info("Business created id=%s user_id=%s", business.id, user_id)
            return Fetched(business)
        except (_RemoteUnavailable, DuplicateRowError) as e:
            now = utcnow()
            draft = business_from_row({**row, "id": "", "created_at": format_ts(now), "updated_at": format_ts(now)})
            return await self._fallback("create_business", e, lambda: self._mock.add_business(draft))

    # ---- tasks ----

    async def get_tasks(self, business_id: str) -> Fetched[list[Task]]:
        try:
            rows = await self._remote_call(lambda r: r.select("tasks", business_id=business_id))
            return Fetched([task_from_row(row) for row in rows])
        except _RemoteUnavailable as e:
            return await self._fallback("get_tasks", e, lambda: self._mock.get_tasks(business_id))

    async def get_task(self, task_id: str) -> Fetched[Task | None]:
        try:
            rows = await self._remote_call(lambda r: r.select("tasks", id=task_id))
            if rows:
                return Fetched(task_from_row(rows[0]))
            raise _RemoteUnavailable(f"Task not found in store: {task_id}")
        except _RemoteUnavailable as e:
            return await self._fallback("get_task", e, lambda: self._mock.get_task(task_id))

    async def get_tasks_by_status(self, business_id: str, status: TaskStatus | str) -> Fetched[list[Task]]:
        status = TaskStatus(status)
        try:
            rows = await self._remote_call(
                lambda r: r.select("tasks", business_id=business_id, status=status.value)
            )
            return Fetched([task_from_row(row) for row in rows])
        except _RemoteUnavailable as e:
            return await self._fallback(
                "get_tasks_by_status", e, lambda: self._mock.get_tasks(business_id, status=status)
            )

    async def get_tasks_by_category(
        self, business_id: str, category: TaskCategory | str
    ) -> Fetched[list[Task]]:
        category = TaskCategory(category)
        try:
            rows = await self._remote_call(
                lambda r: r.select("tasks", business_id=business_id, category=category.value)
            )
            return Fetched([task_from_row(row) for row in rows])
        except _RemoteUnavailable as e:
            return await self._fallback(
                "get_tasks_by_category", e, lambda: self._mock.get_tasks(business_id, category=category)
            )

    async def create_task(
        self,
        *,
        business_id: str,
        title: str,
        description: str = "",
        frequency: TaskFrequency | str = TaskFrequency.ONCE,
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        category: TaskCategory | str = TaskCategory.OTHER,
        status: TaskStatus | str = TaskStatus.PENDING,
        tags: list[str] | None = None,
        due_date: datetime | None = None,
        completed_at: datetime | None = None,
    ) -> Fetched[Task | None]:
        """
        Insert a task.

        A business may hold a given (case-insensitive) title only once; a
        second insert is an expected outcome and yields `value=None`.
        """
        if not title or not title.strip():
            raise ValueError("title is required")

        row: Row = {
            "business_id": business_id,
            "title": title.strip(),
            "description": (description or "").strip(),
            "frequency": TaskFrequency.from_raw(frequency).value,
            "priority": TaskPriority.from_raw(priority).value,
            "category": TaskCategory.from_raw(category).value,
            "status": TaskStatus.from_raw(status).value,
            "tags": list(tags or []),
            "due_date": format_ts(due_date),
            "completed_at": format_ts(completed_at),
        }

        try:
            inserted = await self._remote_call(lambda r: r.insert("tasks", row))
            task = task_from_row(inserted)
            result: Fetched[Task | None] = Fetched(task)
        except DuplicateRowError:
            logger.info("Task already exists business_id=%s title=%r; skipping", business_id, row["title"])
            return Fetched(None)
        except _RemoteUnavailable as e:
            now = utcnow()
            draft = task_from_row({**row, "id": "", "created_at": format_ts(now), "updated_at": format_ts(now)})
            result = await self._fallback("create_task", e, lambda: self._mock.add_task(draft))
            if result.value is None:
                logger.info("Task already exists business_id=%s title=%r; skipping", business_id, row["title"])
                return result

        task = result.value
        if task is not None:
            logger.debug("Task created id=%s business_id=%s source=%s", task.id, business_id, result.source.value)
            self._publish(ChangeKind.INSERT, task)
        return result

    async def update_task_status(self, task_id: str, status: TaskStatus | str) -> Fetched[Task | None]:
        """
        Write a new status.

        `completed_at` is stamped when the new status is completed and cleared
        otherwise, so it is present iff the task is currently completed.
        """
        status = TaskStatus(status)
        now = utcnow()
        completed_at = now if status == TaskStatus.COMPLETED else None
        changes: Row = {
            "status": status.value,
            "updated_at": format_ts(now),
            "completed_at": format_ts(completed_at),
        }

        try:
            row = await self._remote_call(lambda r: r.update("tasks", task_id, changes))
            if row is None:
                raise _RemoteUnavailable(f"Task not found in store: {task_id}")
            result: Fetched[Task | None] = Fetched(task_from_row(row))
        except _RemoteUnavailable as e:
            result = await self._fallback(
                "update_task_status",
                e,
                lambda: self._mock.update_task_status(
                    task_id, status, updated_at=now, completed_at=completed_at
                ),
            )

        if result.value is not None:
            logger.info("Task %s -> %s", task_id, status.value)
            self._publish(ChangeKind.UPDATE, result.value)
        return result

    # ---- tips ----

    async def get_tips(self, business_id: str) -> Fetched[list[Tip]]:
        try:
            rows = await self._remote_call(lambda r: r.select("tips", business_id=business_id))
            return Fetched([tip_from_row(row) for row in rows])
        except _RemoteUnavailable as e:
            return await self._fallback("get_tips", e, lambda: self._mock.get_tips(business_id))

    async def get_tips_by_category(self, business_id: str, category: TaskCategory | str) -> Fetched[list[Tip]]:
        category = TaskCategory(category)
        try:
            rows = await self._remote_call(
                lambda r: r.select("tips", business_id=business_id, category=category.value)
            )
            return Fetched([tip_from_row(row) for row in rows])
        except _RemoteUnavailable as e:
            return await self._fallback(
                "get_tips_by_category", e, lambda: self._mock.get_tips(business_id, category=category)
            )
