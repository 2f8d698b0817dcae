# tests/test_gateway.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bizboard.core.forms import validate_business_form
from bizboard.core.models import BusinessSize, TaskCategory, TaskStatus
from bizboard.core.state import StaticAuthProvider
from bizboard.data.changes import ChangeKind
from bizboard.data.gateway import DataGateway, DataSource
from bizboard.data.row_store import SqliteRowStore

from .fakes import FailingRowStore


def _gateway(remote, mock, changes=None, user_id: str | None = "usr_1") -> DataGateway:
    return DataGateway(
        remote=remote,
        mock=mock,
        auth=StaticAuthProvider(user_id),
        changes=changes,
        mock_latency_seconds=0,
    )


@pytest.mark.asyncio
async def test_unreachable_store_falls_back_to_mock(mock) -> None:
    remote = FailingRowStore("connection refused")
    gw = _gateway(remote, mock)

    res = await gw.get_tasks("biz_1")

    assert res.source == DataSource.MOCK
    assert res.degraded
    assert "connection refused" in (res.error or "")
    assert {t.id for t in res.value} == {"task_1", "task_2", "task_3", "task_4"}
    assert remote.calls == 1


@pytest.mark.asyncio
async def test_missing_table_falls_back_to_mock(tmp_path: Path, mock) -> None:
    gw = _gateway(SqliteRowStore(tmp_path / "bare.sqlite3", create_schema=False), mock)

    res = await gw.get_businesses("usr_1")

    assert res.degraded
    assert [b.name for b in res.value] == ["Coastal Cafe", "TechNova Solutions"]


@pytest.mark.asyncio
async def test_store_answers_are_not_degraded(store_gateway) -> None:
    created = await store_gateway.create_business(
        user_id="usr_1",
        name="Harbor Books",
        type="Bookstore",
        location="Portland, ME",
        industry="Retail",
        size="micro",
        description="Independent bookstore with a reading cafe.",
        founded_year=2015,
    )
    assert created.source == DataSource.REMOTE
    assert created.value.size == BusinessSize.MICRO

    listed = await store_gateway.get_businesses("usr_1")
    assert not listed.degraded
    assert [b.id for b in listed.value] == [created.value.id]

    one = await store_gateway.get_business(created.value.id)
    assert one.value.name == "Harbor Books"
    assert one.value.founded_year == 2015


@pytest.mark.asyncio
async def test_single_row_missing_in_store_uses_mock(store_gateway) -> None:
    res = await store_gateway.get_business("biz_1")
    assert res.degraded
    assert res.value.name == "Coastal Cafe"

    missing = await store_gateway.get_task("task_404")
    assert missing.value is None


@pytest.mark.asyncio
async def test_current_user(mock) -> None:
    res = await _gateway(None, mock).get_current_user()
    assert res.value.name == "Jane Smith"

    anonymous = await _gateway(None, mock, user_id=None).get_current_user()
    assert anonymous.value.id == "usr_1"
    assert anonymous.degraded


@pytest.mark.asyncio
async def test_filtered_queries(gateway) -> None:
    pending = (await gateway.get_tasks_by_status("biz_1", "pending")).value
    assert [t.id for t in pending] == ["task_1", "task_3"]

    marketing = (await gateway.get_tasks_by_category("biz_1", TaskCategory.MARKETING)).value
    assert [t.id for t in marketing] == ["task_1"]

    tips = (await gateway.get_tips_by_category("biz_1", "operations")).value
    assert [t.id for t in tips] == ["tip_2"]
    assert len((await gateway.get_tips("biz_2")).value) == 1

    with pytest.raises(ValueError):
        await gateway.get_tasks_by_status("biz_1", "someday")


@pytest.mark.asyncio
async def test_store_filtered_queries(store_gateway) -> None:
    await store_gateway.create_task(business_id="biz_7", title="Order cups", category="operations")
    await store_gateway.create_task(
        business_id="biz_7", title="Pay rent", category="finance", status=TaskStatus.IN_PROGRESS
    )

    ops = (await store_gateway.get_tasks_by_category("biz_7", "operations")).value
    assert [t.title for t in ops] == ["Order cups"]

    busy = await store_gateway.get_tasks_by_status("biz_7", TaskStatus.IN_PROGRESS)
    assert not busy.degraded
    assert [t.title for t in busy.value] == ["Pay rent"]


@pytest.mark.asyncio
async def test_duplicate_task_is_an_empty_result(gateway, store_gateway) -> None:
    dup = await gateway.create_task(business_id="biz_1", title="renew BUSINESS license")
    assert dup.value is None

    first = await store_gateway.create_task(business_id="biz_5", title="Hire a barista")
    again = await store_gateway.create_task(business_id="biz_5", title="HIRE A BARISTA")
    assert first.value is not None
    assert again.value is None
    assert again.source == DataSource.REMOTE


@pytest.mark.asyncio
async def test_empty_title_is_rejected(gateway) -> None:
    with pytest.raises(ValueError):
        await gateway.create_task(business_id="biz_1", title="   ")


@pytest.mark.asyncio
async def test_writes_publish_change_events(gateway, changes) -> None:
    inserts, updates = [], []
    changes.subscribe("tasks", "biz_2", inserts.append, events=(ChangeKind.INSERT,))
    changes.subscribe("tasks", "biz_2", updates.append)

    created = (await gateway.create_task(business_id="biz_2", title="Refresh case studies")).value
    await gateway.update_task_status(created.id, TaskStatus.COMPLETED)
    await gateway.update_task_status("task_1", TaskStatus.COMPLETED)  # other business
    missing = await gateway.update_task_status("task_999", TaskStatus.COMPLETED)

    assert [e.row_id for e in inserts] == [created.id]
    assert [e.row_id for e in updates] == [created.id]
    assert missing.value is None


@pytest.mark.asyncio
async def test_create_business_falls_back_to_mock(mock) -> None:
    gw = _gateway(FailingRowStore(), mock)
    res = await gw.create_business(
        user_id="usr_1",
        name="Sunset Yoga",
        type="Studio",
        location="San Diego, CA",
        industry="Fitness",
        size=BusinessSize.SOLE_PROPRIETOR,
        description="Small yoga studio near the beach.",
        website="",
    )
    assert res.degraded
    assert res.value.id == "biz_3"
    assert res.value.website is None
    assert mock.get_business("biz_3").name == "Sunset Yoga"


@pytest.mark.asyncio
async def test_business_form_round_trip_through_store(store_gateway) -> None:
    form, errors = validate_business_form(
        {
            "name": "Harbor Books",
            "type": "Bookstore",
            "location": "Portland, ME",
            "industry": "Retail",
            "size": "micro",
            "description": "Independent bookstore with a reading cafe.",
            "founded_year": "2015",
            "website": "https://harborbooks.example.com",
            "logo_url": "/logos/harbor.png",
        }
    )
    assert errors == {}

    created = (await store_gateway.create_business(user_id="usr_42", **form.model_dump())).value
    listed = await store_gateway.get_businesses("usr_42")

    assert not listed.degraded
    assert listed.value == [created]
    back = listed.value[0]
    for field_name, value in form.model_dump().items():
        assert getattr(back, field_name) == value, field_name
    assert back.user_id == "usr_42"


@pytest.mark.asyncio
async def test_no_signed_in_user_is_not_a_store_warning(row_store, mock, caplog) -> None:
    gw = _gateway(row_store, mock, user_id=None)

    with caplog.at_level(logging.DEBUG, logger="bizboard.data.gateway"):
        res = await gw.get_current_user()

    assert res.value.id == "usr_1"
    assert res.source == DataSource.MOCK
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
