# src/bizboard/tasks/fallback.py

from __future__ import annotations

"""
Canned local tasks.

Used only when the remote generation path fails, so the dashboard still has
something to show. At most one template per business type.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from ..core.models import Business, Task, TaskCategory, TaskFrequency, TaskPriority, TaskStatus, title_key
from ..data.gateway import DataGateway
from ..data.rows import utcnow

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CannedTask:
    title: str
    description: str
    frequency: TaskFrequency
    priority: TaskPriority
    category: TaskCategory
    due_in_days: int
    tags: tuple[str, ...] = field(default_factory=tuple)


CANNED_TASKS: dict[str, CannedTask] = {
    "cafe": CannedTask(
        title="Create seasonal menu specials",
        description=(
            "Develop and test new seasonal menu items using locally sourced ingredients. "
            "Focus on both beverages and food items."
        ),
        frequency=TaskFrequency.QUARTERLY,
        priority=TaskPriority.MEDIUM,
        category=TaskCategory.OPERATIONS,
        due_in_days=14,
        tags=("menu development", "seasonal", "local sourcing"),
    ),
    "consultancy": CannedTask(
        title="Develop client onboarding process documentation",
        description=(
            "Create comprehensive documentation for the client onboarding process to ensure "
            "consistency and quality in service delivery."
        ),
        frequency=TaskFrequency.ONCE,
        priority=TaskPriority.HIGH,
        category=TaskCategory.OPERATIONS,
        due_in_days=10,
        tags=("process improvement", "documentation", "client management"),
    ),
}


def canned_task_for(business: Business | None) -> CannedTask | None:
    if business is None:
        return None
    return CANNED_TASKS.get((business.type or "").strip().casefold())


async def generate_canned_tasks(gateway: DataGateway, business_id: str) -> list[Task]:
    """Persist the canned task for the business type, unless it already exists."""
    business = (await gateway.get_business(business_id)).value
    template = canned_task_for(business)
    if business is None or template is None:
        logger.info("No canned tasks for business_id=%s", business_id)
        return []

    existing = (await gateway.get_tasks(business_id)).value
    if title_key(template.title) in {t.title_key for t in existing}:
        logger.info("Canned task already present business_id=%s", business_id)
        return []

    created = await gateway.create_task(
        business_id=business_id,
        title=template.title,
        description=template.description,
        frequency=template.frequency,
        priority=template.priority,
        category=template.category,
        status=TaskStatus.PENDING,
        tags=list(template.tags),
        due_date=utcnow() + timedelta(days=template.due_in_days),
    )
    return [created.value] if created.value is not None else []
