# src/bizboard/dashboard/session.py

"""
Dashboard orchestration.

Transport-agnostic view model behind the console (and any other front end):
- loads user -> businesses -> (tasks, tips) strictly in that order,
- keeps one change subscription for the selected business's tasks and
  refetches the whole task list when it fires,
- exposes actions (generate tasks, move a task, add a business) that report
  to the user through a Notifier,
- derives per-status counts from the current task list on every access.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..core.forms import validate_business_form
from ..core.models import Business, Task, TaskStatus, Tip, User
from ..core.ports import Notification, Notifier, TaskGeneratorPort
from ..data.changes import ChangeEvent, ChangeFeed, ChangeKind, Subscription
from ..data.gateway import DataGateway, Fetched
from ..tasks.lifecycle import TaskLifecycle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NotificationLog:
    """Notifier that just keeps what it was told (console prints from it, tests assert on it)."""

    items: list[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        logger.debug("Notify: %s - %s", notification.title, notification.description)
        self.items.append(notification)

    def drain(self) -> list[Notification]:
        out, self.items = self.items, []
        return out


class DashboardSession:
    def __init__(
        self,
        *,
        gateway: DataGateway,
        generator: TaskGeneratorPort,
        lifecycle: TaskLifecycle,
        changes: ChangeFeed | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._gateway = gateway
        self._generator = generator
        self._lifecycle = lifecycle
        self._changes = changes
        self.notifier: Notifier = notifier if notifier is not None else NotificationLog()

        self.user: User | None = None
        self.businesses: list[Business] = []
        self.selected: Business | None = None
        self.tasks: list[Task] = []
        self.tips: list[Tip] = []
        self.generating = False

        self._subscription: Subscription | None = None
        self._refreshes: set[asyncio.Task[None]] = set()
        self._offline_warned = False

    # ---- helpers ----

    def _track(self, result: Fetched[Any]) -> Any:
        """Unwrap a gateway result; warn once per session when data is coming from the mock store."""
        if result.degraded and not self._offline_warned:
            self._offline_warned = True
            self.notifier.notify(
                Notification(
                    title="Working offline",
                    description="Showing demo data because the data store is unavailable.",
                    variant="warning",
                )
            )
        return result.value

    def _subscribe(self, business_id: str) -> None:
        self._unsubscribe()
        if self._changes is None:
            return
        self._subscription = self._changes.subscribe(
            "tasks", business_id, self._on_task_change, events=(ChangeKind.UPDATE,)
        )

    def _unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_task_change(self, event: ChangeEvent) -> None:
        if self.selected is None or event.business_id != self.selected.id:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Task change outside an event loop; skipping refetch")
            return
        task = loop.create_task(self.refresh_tasks())
        self._refreshes.add(task)
        task.add_done_callback(self._refresh_done)

    def _refresh_done(self, task: asyncio.Task[None]) -> None:
        self._refreshes.discard(task)
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            logger.error("Task refetch failed", exc_info=err)

    async def wait_for_refresh(self) -> None:
        """Await every refetch triggered by change notifications that is still in flight."""
        while True:
            pending = [t for t in self._refreshes if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ---- loading ----

    async def load(self) -> None:
        """Fetch user, then businesses, then the selected business's tasks and tips."""
        self.user = self._track(await self._gateway.get_current_user())
        if self.user is None:
            logger.warning("No current user; dashboard stays empty")
            return

        await self.refresh_businesses()
        if self.selected is None and self.businesses:
            await self.select_business(self.businesses[0].id)

    async def refresh_businesses(self) -> None:
        if self.user is None:
            self.businesses = []
            return
        self.businesses = self._track(await self._gateway.get_businesses(self.user.id))

    async def select_business(self, business_id: str) -> Business | None:
        business = next((b for b in self.businesses if b.id == business_id), None)
        if business is None:
            business = self._track(await self._gateway.get_business(business_id))
        if business is None:
            return None

        self.selected = business
        self._subscribe(business.id)
        self.tasks, self.tips = [], []
        await self.refresh_tasks()
        await self.refresh_tips()
        return business

    async def refresh_tasks(self) -> None:
        if self.selected is None:
            self.tasks = []
            return
        self.tasks = self._track(await self._gateway.get_tasks(self.selected.id))

    async def refresh_tips(self) -> None:
        if self.selected is None:
            self.tips = []
            return
        self.tips = self._track(await self._gateway.get_tips(self.selected.id))

    # ---- derived state ----

    @property
    def counts(self) -> dict[TaskStatus, int]:
        out = {s: 0 for s in TaskStatus}
        for t in self.tasks:
            out[t.status] += 1
        return out

    def tasks_with_status(self, status: TaskStatus | str) -> list[Task]:
        status = TaskStatus(status)
        return [t for t in self.tasks if t.status == status]

    def find_task(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    # ---- actions ----

    async def generate_tasks(self) -> list[Task]:
        if self.selected is None:
            return []

        self.generating = True
        self.notifier.notify(
            Notification(
                title="Generating tasks...",
                description="Analyzing your business data to create personalized tasks.",
            )
        )
        try:
            new_tasks = await self._generator.generate(self.selected.id)
        except Exception:
            logger.exception("Task generation crashed business_id=%s", self.selected.id)
            self.notifier.notify(
                Notification(
                    title="Task generation failed",
                    description="There was an error generating tasks. Please try again.",
                    variant="destructive",
                )
            )
            return []
        finally:
            self.generating = False

        self.notifier.notify(
            Notification(
                title=f"{len(new_tasks)} new tasks created!",
                description="New tasks were generated based on your business information.",
            )
        )
        await self.refresh_tasks()
        return new_tasks

    async def change_task_status(self, task_id: str, status: TaskStatus | str) -> Task | None:
        updated = await self._lifecycle.set_status(task_id, status)
        if updated is None:
            self.notifier.notify(
                Notification(title="Task not found", description=f"No task with id {task_id}.", variant="destructive")
            )
            return None

        # Show the new state right away; the refetch below reconciles.
        self.tasks = [updated if t.id == updated.id else t for t in self.tasks]
        await self.refresh_tasks()
        return updated

    async def add_business(self, data: Mapping[str, Any]) -> tuple[Business | None, dict[str, str]]:
        """Validate and create a business. Returns (business, field_errors)."""
        if self.user is None:
            return None, {"form": "No signed-in user"}

        form, errors = validate_business_form(data)
        if form is None:
            self.notifier.notify(
                Notification(
                    title="Please fix the highlighted fields",
                    description="; ".join(f"{k}: {v}" for k, v in errors.items()),
                    variant="destructive",
                )
            )
            return None, errors

        business = self._track(
            await self._gateway.create_business(user_id=self.user.id, **form.model_dump())
        )
        self.notifier.notify(
            Notification(title="Business created", description=f"{business.name} is ready for tasks.")
        )
        await self.refresh_businesses()
        if all(b.id != business.id for b in self.businesses):
            self.businesses.append(business)
        await self.select_business(business.id)
        return business, {}

    def close(self) -> None:
        self._unsubscribe()
        for task in list(self._refreshes):
            if not task.done():
                task.cancel()
        self._refreshes.clear()
