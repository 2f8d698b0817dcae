# tests/test_dashboard.py

from __future__ import annotations

import asyncio
import json

import pytest

from bizboard.core.models import TaskStatus
from bizboard.dashboard.session import DashboardSession, NotificationLog
from bizboard.tasks.lifecycle import TaskLifecycle

from .fakes import RecordingGenerator


def _titles(session: DashboardSession) -> list[str]:
    return [n.title for n in session.notifier.items]


@pytest.mark.asyncio
async def test_load_selects_first_business(session: DashboardSession) -> None:
    await session.load()

    assert session.user.name == "Jane Smith"
    assert [b.id for b in session.businesses] == ["biz_1", "biz_2"]
    assert session.selected.id == "biz_1"
    assert len(session.tasks) == 4
    assert [t.id for t in session.tips] == ["tip_1", "tip_2"]


@pytest.mark.asyncio
async def test_offline_warning_is_posted_once(session: DashboardSession) -> None:
    await session.load()
    await session.select_business("biz_2")
    assert _titles(session).count("Working offline") == 1


@pytest.mark.asyncio
async def test_counts_follow_task_list(session: DashboardSession) -> None:
    await session.load()
    assert session.counts == {
        TaskStatus.PENDING: 2,
        TaskStatus.IN_PROGRESS: 1,
        TaskStatus.COMPLETED: 1,
        TaskStatus.CANCELLED: 0,
    }

    await session.change_task_status("task_1", TaskStatus.IN_PROGRESS)
    await session.wait_for_refresh()

    assert session.counts[TaskStatus.PENDING] == 1
    assert session.counts[TaskStatus.IN_PROGRESS] == 2
    assert [t.id for t in session.tasks_with_status("in_progress")] == ["task_1", "task_2"]


@pytest.mark.asyncio
async def test_external_update_triggers_refetch(session: DashboardSession, gateway) -> None:
    await session.load()

    # Someone else moves a task; the session only learns about it through the feed.
    await gateway.update_task_status("task_3", TaskStatus.COMPLETED)
    await session.wait_for_refresh()

    assert session.find_task("task_3").status == TaskStatus.COMPLETED


@pytest.mark.asyncio
async def test_one_subscription_per_selection(session: DashboardSession, changes, gateway) -> None:
    await session.load()
    assert changes.subscriber_count() == 1

    await session.select_business("biz_2")
    assert changes.subscriber_count() == 1

    # Updates for the previously selected business no longer reach the session.
    await gateway.update_task_status("task_1", TaskStatus.CANCELLED)
    await session.wait_for_refresh()
    assert {t.business_id for t in session.tasks} == {"biz_2"}

    session.close()
    assert changes.subscriber_count() == 0


@pytest.mark.asyncio
async def test_generate_tasks_reports_progress(session: DashboardSession, llm) -> None:
    llm.next_text = json.dumps(
        [
            {"title": "Launch a loyalty program", "category": "marketing"},
            {"title": "Host a latte art night", "category": "sales"},
        ]
    )
    await session.load()
    session.notifier.drain()

    created = await session.generate_tasks()

    assert len(created) == 2
    assert _titles(session) == ["Generating tasks...", "2 new tasks created!"]
    assert len(session.tasks) == 6
    assert session.generating is False


@pytest.mark.asyncio
async def test_generate_tasks_uses_canned_task_when_llm_fails(session: DashboardSession, llm) -> None:
    llm.error = RuntimeError("LLM network/timeout error")
    await session.load()
    session.notifier.drain()

    created = await session.generate_tasks()

    assert [t.title for t in created] == ["Create seasonal menu specials"]
    assert _titles(session)[-1] == "1 new tasks created!"


@pytest.mark.asyncio
async def test_generator_crash_is_reported(gateway, changes) -> None:
    gen = RecordingGenerator(error=RuntimeError("boom"))
    s = DashboardSession(
        gateway=gateway,
        generator=gen,
        lifecycle=TaskLifecycle(gateway),
        changes=changes,
        notifier=NotificationLog(),
    )
    await s.load()
    s.notifier.drain()

    assert await s.generate_tasks() == []
    failed = s.notifier.items[-1]
    assert failed.title == "Task generation failed"
    assert failed.variant == "destructive"
    assert s.generating is False
    s.close()


@pytest.mark.asyncio
async def test_move_unknown_task(session: DashboardSession) -> None:
    await session.load()
    assert await session.change_task_status("task_999", TaskStatus.COMPLETED) is None
    assert _titles(session)[-1] == "Task not found"


@pytest.mark.asyncio
async def test_invalid_business_form_never_reaches_gateway(
    session: DashboardSession, gateway, monkeypatch
) -> None:
    await session.load()
    calls = []

    async def spy(**kwargs):
        calls.append(kwargs)
        raise AssertionError("create_business should not be called")

    monkeypatch.setattr(gateway, "create_business", spy)

    business, errors = await session.add_business({"name": "X", "type": "Cafe", "description": "short"})

    assert business is None
    assert calls == []
    assert errors["name"] == "Business name must be at least 2 characters"
    assert "description" in errors and "location" in errors
    assert session.selected.id == "biz_1"


@pytest.mark.asyncio
async def test_add_business_selects_it(session: DashboardSession, mock) -> None:
    await session.load()

    business, errors = await session.add_business(
        {
            "name": "Harbor Books",
            "type": "Bookstore",
            "location": "Portland, ME",
            "industry": "Retail",
            "size": "micro",
            "description": "Independent bookstore with a reading cafe.",
            "founded_year": "2015",
            "website": "https://harborbooks.example.com",
        }
    )

    assert errors == {}
    assert business.id == "biz_3"
    assert session.selected.id == "biz_3"
    assert session.tasks == [] and session.tips == []
    assert mock.get_business("biz_3").founded_year == 2015
    assert "Business created" in _titles(session)


@pytest.mark.asyncio
async def test_every_pending_refetch_is_tracked(session: DashboardSession, gateway) -> None:
    await session.load()

    await gateway.update_task_status("task_1", TaskStatus.IN_PROGRESS)
    await gateway.update_task_status("task_3", TaskStatus.COMPLETED)
    await session.wait_for_refresh()

    assert session.find_task("task_1").status == TaskStatus.IN_PROGRESS
    assert session.find_task("task_3").status == TaskStatus.COMPLETED


@pytest.mark.asyncio
async def test_close_cancels_every_pending_refetch(session: DashboardSession, gateway) -> None:
    await session.load()

    await gateway.update_task_status("task_1", TaskStatus.CANCELLED)
    await gateway.update_task_status("task_3", TaskStatus.CANCELLED)
    in_flight = set(session._refreshes)
    assert len(in_flight) == 2

    session.close()
    await asyncio.sleep(0)

    assert all(t.cancelled() for t in in_flight)
    assert not session._refreshes
