# src/bizboard/tasks/generator.py

"""
LLM task generator.

Flow for one business:
- resolve the business and the titles it already has,
- build a prompt with the business profile and the JSON task contract,
- make a single chat-completion call,
- extract/parse the JSON, drop titles we already have (case-insensitive),
- normalize tags and due dates, persist the survivors as pending tasks.

`generate()` never raises: any failure before persistence switches to the
canned local tasks (tasks/fallback.py). `generate_for()` is the strict
variant used by the HTTP endpoint.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.models import (
    Business,
    Task,
    TaskCategory,
    TaskFrequency,
    TaskPriority,
    TaskStatus,
    title_key,
)
from ..core.ports import LLMClient
from ..data.gateway import DataGateway
from ..llm.client import friendly_llm_error_message
from .extraction import (
    BusinessNotFoundError,
    normalize_tags,
    parse_due_date,
    parse_task_candidates,
)
from .fallback import generate_canned_tasks

logger = logging.getLogger(__name__)

TASK_GENERATOR_SYSTEM_PROMPT = (
    "You are a business assistant that generates actionable tasks for businesses. "
    "Always respond with valid JSON."
)

DEFAULT_TEMPERATURE = 0.7


def _choices(enum_cls: Any) -> str:
    return ", ".join(f'"{m.value}"' for m in enum_cls)


def build_prompt(business: Business, existing_titles: list[str]) -> str:
    lines = [
        f"Generate 3-5 actionable business tasks for a {business.type} business "
        f'in the {business.industry} industry, named "{business.name}".',
        "",
        "Business Details:",
        f"- Size: {business.size.value}",
        f"- Location: {business.location}",
        f"- Description: {business.description}",
    ]
    if business.founded_year:
        lines.append(f"- Founded Year: {business.founded_year}")
    if business.website:
        lines.append(f"- Website: {business.website}")

    lines.extend(
        [
            "",
            "For each task, provide the following in JSON format:",
            "1. title - A clear, concise title",
            "2. description - Detailed description with actionable steps",
            f"3. frequency - One of: {_choices(TaskFrequency)}",
            f"4. priority - One of: {_choices(TaskPriority)}",
            f"5. category - One of: {_choices(TaskCategory)}",
            "6. tags - An array of 1-3 relevant tags as strings",
            "7. due_date - Suggested due date in ISO format (YYYY-MM-DD), "
            "reasonable based on priority and current date",
            "",
        ]
    )
    if existing_titles:
        lines.append(f"Avoid generating tasks with these titles: {', '.join(existing_titles)}.")
        lines.append("")
    lines.append("Format the response as a valid JSON array of task objects.")
    return "\n".join(lines)


class TaskGenerator:
    def __init__(
        self,
        gateway: DataGateway,
        llm: LLMClient,
        *,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        self._gateway = gateway
        self._llm = llm
        self._temperature = float(temperature)

    async def generate(self, business_id: str) -> list[Task]:
        """Generate tasks for a business; falls back to canned tasks on any failure."""
        try:
            business = (await self._gateway.get_business(business_id)).value
            if business is None:
                raise BusinessNotFoundError(f"Business not found: {business_id}")
            return await self.generate_for(business)
        except Exception as e:
            logger.warning(
                "Task generation failed business_id=%s (%s); using canned tasks",
                business_id,
                friendly_llm_error_message(e),
            )
            logger.debug("Task generation failure detail", exc_info=True)
            return await generate_canned_tasks(self._gateway, business_id)

    async def generate_for(self, business: Business) -> list[Task]:
        """Strict generation for a resolved business. Raises on LLM/parse failures."""
        existing = (await self._gateway.get_tasks(business.id)).value
        existing_titles = [t.title for t in existing]
        excluded = {title_key(t) for t in existing_titles}

        prompt = build_prompt(business, existing_titles)
        logger.debug("Task prompt business_id=%s preview=%r", business.id, prompt[:200])

        raw = await self._llm.complete(
            [{"role": "user", "content": prompt}],
            TASK_GENERATOR_SYSTEM_PROMPT,
            temperature=self._temperature,
        )
        candidates = parse_task_candidates(raw)
        logger.info("Parsed %d task candidates business_id=%s", len(candidates), business.id)

        created: list[Task] = []
        for cand in candidates:
            title = str(cand.get("title") or "").strip()
            if not title:
                logger.debug("Skipping candidate without title: %r", cand)
                continue

            key = title_key(title)
            if key in excluded:
                logger.info("Skipping existing task: %s", title)
                continue
            excluded.add(key)

            result = await self._gateway.create_task(
                business_id=business.id,
                title=title,
                description=str(cand.get("description") or ""),
                frequency=TaskFrequency.from_raw(cand.get("frequency")),
                priority=TaskPriority.from_raw(cand.get("priority")),
                category=TaskCategory.from_raw(cand.get("category")),
                status=TaskStatus.PENDING,
                tags=normalize_tags(cand.get("tags")),
                due_date=parse_due_date(cand.get("due_date", cand.get("dueDate"))),
            )
            if result.value is not None:
                created.append(result.value)

        logger.info("Generated %d tasks business_id=%s", len(created), business.id)
        return created
