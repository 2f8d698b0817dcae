# src/bizboard/data/rows.py

"""Store-row <-> domain mapping.

Rows are what the managed store speaks: snake_case keys, foreign keys as
opaque strings, timestamps as ISO-8601 strings, tags as a list. Domain
records use datetime objects and enums.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

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
from ..core.ports import Row


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_ts(raw: Any) -> datetime | None:
    """ISO string / datetime -> aware datetime (naive values are taken as UTC)."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        try:
            dt = datetime.fromisoformat(str(raw).strip())
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def format_ts(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat()


def _tags(raw: Any) -> list[str]:
    if isinstance(raw, list):
        return [str(t) for t in raw if str(t).strip()]
    return []


def _opt_int(raw: Any) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def user_from_row(row: Row) -> User:
    return User(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or ""),
        created_at=parse_ts(row.get("created_at")) or utcnow(),
        updated_at=parse_ts(row.get("updated_at")) or utcnow(),
    )


def business_from_row(row: Row) -> Business:
    return Business(
        id=str(row["id"]),
        user_id=str(row.get("user_id") or ""),
        name=str(row.get("name") or ""),
        type=str(row.get("type") or ""),
        location=str(row.get("location") or ""),
        industry=str(row.get("industry") or ""),
        size=BusinessSize.from_raw(row.get("size")),
        description=str(row.get("description") or ""),
        founded_year=_opt_int(row.get("founded_year")),
        website=row.get("website") or None,
        logo_url=row.get("logo_url") or None,
        created_at=parse_ts(row.get("created_at")) or utcnow(),
        updated_at=parse_ts(row.get("updated_at")) or utcnow(),
    )


def task_from_row(row: Row) -> Task:
    return Task(
        id=str(row["id"]),
        business_id=str(row.get("business_id") or ""),
        title=str(row.get("title") or ""),
        description=str(row.get("description") or ""),
        frequency=TaskFrequency.from_raw(row.get("frequency")),
        priority=TaskPriority.from_raw(row.get("priority")),
        status=TaskStatus.from_raw(row.get("status")),
        category=TaskCategory.from_raw(row.get("category")),
        tags=_tags(row.get("tags")),
        due_date=parse_ts(row.get("due_date")),
        completed_at=parse_ts(row.get("completed_at")),
        created_at=parse_ts(row.get("created_at")) or utcnow(),
        updated_at=parse_ts(row.get("updated_at")) or utcnow(),
    )


def task_to_row(task: Task) -> Row:
    return {
        "id": task.id,
        "business_id": task.business_id,
        "title": task.title,
        "description": task.description,
        "frequency": task.frequency.value,
        "priority": task.priority.value,
        "status": task.status.value,
        "category": task.category.value,
        "tags": list(task.tags),
        "due_date": format_ts(task.due_date),
        "completed_at": format_ts(task.completed_at),
        "created_at": format_ts(task.created_at),
        "updated_at": format_ts(task.updated_at),
    }


def tip_from_row(row: Row) -> Tip:
    return Tip(
        id=str(row["id"]),
        business_id=str(row.get("business_id") or ""),
        title=str(row.get("title") or ""),
        content=str(row.get("content") or ""),
        category=TaskCategory.from_raw(row.get("category")),
        source=row.get("source") or None,
        created_at=parse_ts(row.get("created_at")) or utcnow(),
        updated_at=parse_ts(row.get("updated_at")) or utcnow(),
    )
