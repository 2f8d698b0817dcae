# src/bizboard/data/mock_store.py

"""
In-process demo dataset.

The gateway falls back to this when the row store is unavailable. It is an
explicit object (one per run or per test) rather than module-level lists, so
nothing leaks between tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

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
    title_key,
)
from .rows import utcnow


@dataclass(slots=True)
class MockStore:
    users: list[User] = field(default_factory=list)
    businesses: list[Business] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    tips: list[Tip] = field(default_factory=list)

    # ---- reads ----

    def get_user(self, user_id: str | None) -> User | None:
        if user_id:
            for u in self.users:
                if u.id == user_id:
                    return u
        # No session (or an unknown one): the demo user stands in.
        return self.users[0] if self.users else None

    def get_businesses(self, user_id: str) -> list[Business]:
        return [b for b in self.businesses if b.user_id == user_id]

    def get_business(self, business_id: str) -> Business | None:
        return next((b for b in self.businesses if b.id == business_id), None)

    def get_tasks(
        self,
        business_id: str,
        *,
        status: TaskStatus | None = None,
        category: TaskCategory | None = None,
    ) -> list[Task]:
        out = [t for t in self.tasks if t.business_id == business_id]
        if status is not None:
            out = [t for t in out if t.status == status]
        if category is not None:
            out = [t for t in out if t.category == category]
        return out

    def get_task(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def get_tips(self, business_id: str, *, category: TaskCategory | None = None) -> list[Tip]:
        out = [t for t in self.tips if t.business_id == business_id]
        if category is not None:
            out = [t for t in out if t.category == category]
        return out

    # ---- writes (in place, no rollback) ----

    def add_business(self, business: Business) -> Business:
        if not business.id:
            business = replace(business, id=f"biz_{len(self.businesses) + 1}")
        self.businesses.append(business)
        return business

    def add_task(self, task: Task) -> Task | None:
        """Append a task; returns None when the business already has that title."""
        key = task.title_key
        if any(t.business_id == task.business_id and t.title_key == key for t in self.tasks):
            return None
        if not task.id:
            task = replace(task, id=f"task_{len(self.tasks) + 1}")
        self.tasks.append(task)
        return task

    def update_task_status(
        self,
        task_id: str,
        status: TaskStatus,
        *,
        updated_at: datetime,
        completed_at: datetime | None,
    ) -> Task | None:
        for i, t in enumerate(self.tasks):
            if t.id == task_id:
                updated = replace(t, status=status, updated_at=updated_at, completed_at=completed_at)
                self.tasks[i] = updated
                return updated
        return None

    def has_task_title(self, business_id: str, title: str) -> bool:
        key = title_key(title)
        return any(t.business_id == business_id and t.title_key == key for t in self.tasks)

    # ---- demo data ----

    @classmethod
    def seeded(cls, *, now: datetime | None = None) -> MockStore:
        """Build the demo dataset: one user, a cafe and a consultancy with tasks and tips."""
        now = now or utcnow()

        def days(n: float) -> datetime:
            return now + timedelta(days=n)

        def fixed(y: int, m: int, d: int) -> datetime:
            return datetime(y, m, d, tzinfo=UTC)

        users = [
            User(
                id="usr_1",
                name="Jane Smith",
                email="jane@example.com",
                created_at=fixed(2023, 1, 15),
                updated_at=fixed(2023, 1, 15),
            )
        ]

        businesses = [
            Business(
                id="biz_1",
                user_id="usr_1",
                name="Coastal Cafe",
                type="Cafe",
                location="San Francisco, CA",
                industry="Food & Beverage",
                size=BusinessSize.SMALL,
                description="A cozy cafe offering artisanal coffee and homemade pastries with ocean views.",
                founded_year=2020,
                website="https://coastalcafe.example.com",
                logo_url="/placeholder.svg",
                created_at=fixed(2023, 2, 10),
                updated_at=fixed(2023, 6, 22),
            ),
            Business(
                id="biz_2",
                user_id="usr_1",
                name="TechNova Solutions",
                type="Consultancy",
                location="Boston, MA",
                industry="Technology",
                size=BusinessSize.MEDIUM,
                description="IT consultancy specializing in cloud solutions and digital transformation.",
                founded_year=2018,
                website="https://technovasolutions.example.com",
                created_at=fixed(2023, 3, 15),
                updated_at=fixed(2023, 5, 10),
            ),
        ]

        tasks = [
            Task(
                id="task_1",
                business_id="biz_1",
                title="Update social media profiles with summer specials",
                description=(
                    "Create engaging posts about our new summer drink menu and pastry selection "
                    "for Instagram, Facebook, and Twitter."
                ),
                frequency=TaskFrequency.WEEKLY,
                priority=TaskPriority.MEDIUM,
                status=TaskStatus.PENDING,
                category=TaskCategory.MARKETING,
                tags=["social media", "promotion", "summer"],
                due_date=days(3),
                created_at=days(-2),
                updated_at=days(-2),
            ),
            Task(
                id="task_2",
                business_id="biz_1",
                title="Review monthly expenses and update budget",
                description=(
                    "Go through all receipts and invoices for the past month, categorize expenses, "
                    "and update the budget spreadsheet."
                ),
                frequency=TaskFrequency.MONTHLY,
                priority=TaskPriority.HIGH,
                status=TaskStatus.IN_PROGRESS,
                category=TaskCategory.FINANCE,
                tags=["budget", "accounting", "expense tracking"],
                due_date=days(1),
                created_at=days(-5),
                updated_at=days(-1),
            ),
            Task(
                id="task_3",
                business_id="biz_1",
                title="Schedule staff training for new POS system",
                description=(
                    "Coordinate with the vendor to arrange a training session for all staff on how "
                    "to use the new point-of-sale system."
                ),
                frequency=TaskFrequency.ONCE,
                priority=TaskPriority.CRITICAL,
                status=TaskStatus.PENDING,
                category=TaskCategory.OPERATIONS,
                tags=["training", "POS", "staff development"],
                due_date=days(7),
                created_at=days(-3),
                updated_at=days(-3),
            ),
            Task(
                id="task_4",
                business_id="biz_1",
                title="Renew business license",
                description=(
                    "Complete paperwork and submit payment for annual business license renewal "
                    "with the city."
                ),
                frequency=TaskFrequency.YEARLY,
                priority=TaskPriority.HIGH,
                status=TaskStatus.COMPLETED,
                category=TaskCategory.LEGAL,
                tags=["compliance", "licensing"],
                due_date=days(-1),
                completed_at=days(-2),
                created_at=days(-30),
                updated_at=days(-2),
            ),
            Task(
                id="task_5",
                business_id="biz_2",
                title="Prepare quarterly client progress reports",
                description=(
                    "Create detailed reports for all active clients showcasing project progress, "
                    "milestones achieved, and next steps."
                ),
                frequency=TaskFrequency.QUARTERLY,
                priority=TaskPriority.HIGH,
                status=TaskStatus.IN_PROGRESS,
                category=TaskCategory.OPERATIONS,
                tags=["client management", "reporting", "quarterly review"],
                due_date=days(5),
                created_at=days(-10),
                updated_at=days(-1),
            ),
            Task(
                id="task_6",
                business_id="biz_2",
                title="Update company website with new team members",
                description="Add profiles for new hires to the team page including photos, bios, and roles.",
                frequency=TaskFrequency.ONCE,
                priority=TaskPriority.MEDIUM,
                status=TaskStatus.PENDING,
                category=TaskCategory.MARKETING,
                tags=["website", "team updates"],
                due_date=days(2),
                created_at=days(-4),
                updated_at=days(-4),
            ),
        ]

        tips = [
            Tip(
                id="tip_1",
                business_id="biz_1",
                title="Engaging Social Media Strategies for Cafes",
                content=(
                    "Post behind-the-scenes content of your baristas creating signature drinks. "
                    "Customers love seeing the craft behind their coffee. Try to post during peak "
                    "coffee hours (7-9am and 2-4pm) for maximum engagement."
                ),
                category=TaskCategory.MARKETING,
                source="Coffee Business Monthly",
                created_at=days(-15),
                updated_at=days(-15),
            ),
            Tip(
                id="tip_2",
                business_id="biz_1",
                title="Efficient Inventory Management for Small Cafes",
                content=(
                    "Use the first-in, first-out (FIFO) method for all perishable items. Consider "
                    "implementing a digital inventory system that can track expiration dates and "
                    "automatically generate purchase orders when supplies run low."
                ),
                category=TaskCategory.OPERATIONS,
                source="Restaurant Management Today",
                created_at=days(-20),
                updated_at=days(-20),
            ),
            Tip(
                id="tip_3",
                business_id="biz_2",
                title="Maximizing Client Retention in Tech Consulting",
                content=(
                    "Schedule regular 'value check-ins' that aren't tied to project milestones. Use "
                    "these meetings to understand evolving client needs and identify opportunities "
                    "to provide additional value beyond the current scope of work."
                ),
                category=TaskCategory.SALES,
                source="Tech Consulting Insider",
                created_at=days(-12),
                updated_at=days(-12),
            ),
        ]

        return cls(users=users, businesses=businesses, tasks=tasks, tips=tips)
