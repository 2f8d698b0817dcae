# src/bizboard/core/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


def title_key(title: str) -> str:
    """Case-folded, whitespace-collapsed title used for duplicate detection."""
    return " ".join(str(title or "").split()).casefold()


class _LenientEnum(StrEnum):
    """StrEnum with a forgiving constructor for values coming from storage or an LLM."""

    @classmethod
    def default(cls) -> _LenientEnum:
        raise NotImplementedError

    @classmethod
    def from_raw(cls, raw: object):
        if isinstance(raw, cls):
            return raw
        s = str(raw or "").strip().lower()
        if not s:
            return cls.default()
        try:
            return cls(s)
        except ValueError:
            return cls.default()


class BusinessSize(_LenientEnum):
    SOLE_PROPRIETOR = "sole_proprietor"
    MICRO = "micro"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"

    @classmethod
    def default(cls) -> BusinessSize:
        return cls.SMALL


class TaskStatus(_LenientEnum):
    """
    Task lifecycle status.

    Transitions are open: any status may follow any other (a completed task
    can be reopened, a cancelled one resumed).
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def default(cls) -> TaskStatus:
        return cls.PENDING


class TaskPriority(_LenientEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def default(cls) -> TaskPriority:
        return cls.MEDIUM


class TaskFrequency(_LenientEnum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def default(cls) -> TaskFrequency:
        return cls.ONCE


class TaskCategory(_LenientEnum):
    MARKETING = "marketing"
    FINANCE = "finance"
    OPERATIONS = "operations"
    LEGAL = "legal"
    SALES = "sales"
    CUSTOMER_SERVICE = "customer_service"
    HUMAN_RESOURCES = "human_resources"
    TECHNOLOGY = "technology"
    ADMINISTRATION = "administration"
    STRATEGY = "strategy"
    OTHER = "other"

    @classmethod
    def default(cls) -> TaskCategory:
        return cls.OTHER


@dataclass(slots=True)
class User:
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Business:
    id: str
    user_id: str

    name: str
    type: str
    location: str
    industry: str
    size: BusinessSize
    description: str

    created_at: datetime
    updated_at: datetime

    founded_year: int | None = None
    website: str | None = None
    logo_url: str | None = None


@dataclass(slots=True)
class Task:
    id: str
    business_id: str

    title: str
    description: str
    frequency: TaskFrequency
    priority: TaskPriority
    status: TaskStatus
    category: TaskCategory

    created_at: datetime
    updated_at: datetime

    tags: list[str] = field(default_factory=list)
    due_date: datetime | None = None
    # Set iff status == completed after the last status write.
    completed_at: datetime | None = None

    @property
    def title_key(self) -> str:
        return title_key(self.title)


@dataclass(slots=True)
class Tip:
    id: str
    business_id: str

    title: str
    content: str
    category: TaskCategory

    created_at: datetime
    updated_at: datetime

    source: str | None = None
