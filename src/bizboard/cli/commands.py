# src/bizboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.models import Task, TaskStatus
from ..dashboard.session import DashboardSession

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[DashboardSession, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[DashboardSession, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        session: DashboardSession,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(session, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(session, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_task(i: int, t: Task) -> str:
    due = t.due_date.strftime("%Y-%m-%d") if t.due_date else "-"
    tags = f" [tags: {', '.join(t.tags)}]" if t.tags else ""
    return (
        f"{i}. [{t.status.value}] {t.title} "
        f"(id={t.id}, {t.priority.value}, {t.category.value}, {t.frequency.value}, due {due}){tags}"
    )


async def cmd_help(session: DashboardSession, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(session: DashboardSession, args: list[str]) -> str:
    user = session.user.name if session.user else "(nobody)"
    biz = session.selected.name if session.selected else "(none)"
    counts = session.counts
    return (
        "Status:\n"
        f"  User: {user}\n"
        f"  Business: {biz}\n"
        f"  Tasks: {counts[TaskStatus.PENDING]} pending, "
        f"{counts[TaskStatus.IN_PROGRESS]} in progress, "
        f"{counts[TaskStatus.COMPLETED]} completed, "
        f"{counts[TaskStatus.CANCELLED]} cancelled"
    )


async def cmd_businesses(session: DashboardSession, args: list[str]) -> str:
    await session.refresh_businesses()
    if not session.businesses:
        return "No businesses yet. Add one with /add-business."
    lines = ["Businesses:"]
    for i, b in enumerate(session.businesses, start=1):
        marker = "*" if session.selected and session.selected.id == b.id else " "
        lines.append(f"{marker} {i}. {b.name} ({b.type}, {b.location}) id={b.id}")
    return "\n".join(lines)


async def cmd_select(session: DashboardSession, args: list[str]) -> str:
    """
    /select 2        -> select by list position
    /select biz_1    -> select by id
    """
    if not args:
        return "Usage: /select <number|business_id>"

    ref = args[0]
    business_id = ref
    if ref.isdigit():
        idx = int(ref) - 1
        if not 0 <= idx < len(session.businesses):
            return f"No business #{ref}. Use /businesses to list them."
        business_id = session.businesses[idx].id

    business = await session.select_business(business_id)
    if business is None:
        return f"Business not found: {ref}"
    return f"Selected {business.name} ({len(session.tasks)} tasks, {len(session.tips)} tips)."


async def cmd_tasks(session: DashboardSession, args: list[str]) -> str:
    """
    /tasks               -> all tasks of the selected business
    /tasks in_progress   -> only tasks with that status
    """
    if session.selected is None:
        return "No business selected."

    await session.refresh_tasks()
    tasks = session.tasks
    if args:
        try:
            tasks = session.tasks_with_status(args[0].lower())
        except ValueError:
            return "Unknown status. Use one of: " + ", ".join(s.value for s in TaskStatus)

    if not tasks:
        return "No tasks."
    return "\n".join(_format_task(i, t) for i, t in enumerate(tasks, start=1))


async def cmd_tips(session: DashboardSession, args: list[str]) -> str:
    if session.selected is None:
        return "No business selected."
    await session.refresh_tips()
    if not session.tips:
        return "No tips."
    lines = []
    for i, tip in enumerate(session.tips, start=1):
        src = f" ({tip.source})" if tip.source else ""
        lines.append(f"{i}. [{tip.category.value}] {tip.title}{src}\n   {tip.content}")
    return "\n".join(lines)


async def cmd_generate(session: DashboardSession, args: list[str], emit: CommandEmitter | None = None) -> str:
    if session.selected is None:
        return "No business selected."
    if emit:
        emit(f"Generating tasks for {session.selected.name}...")
    new_tasks = await session.generate_tasks()
    if not new_tasks:
        return "No new tasks."
    return "\n".join(_format_task(i, t) for i, t in enumerate(new_tasks, start=1))


async def cmd_move(session: DashboardSession, args: list[str]) -> str:
    """/move <task_id> <status>"""
    if len(args) < 2:
        return "Usage: /move <task_id> <pending|in_progress|completed|cancelled>"
    task_id, raw_status = args[0], args[1].lower()
    try:
        status = TaskStatus(raw_status)
    except ValueError:
        return "Unknown status. Use one of: " + ", ".join(s.value for s in TaskStatus)

    task = await session.change_task_status(task_id, status)
    if task is None:
        return f"Task not found: {task_id}"
    return f"Task {task.id} is now {task.status.value}."


async def cmd_add_business(session: DashboardSession, args: list[str]) -> str:
    """/add-business name="Coastal Cafe" type=Cafe location=... industry=... size=small description=..."""
    data: dict[str, str] = {}
    for arg in args:
        if "=" not in arg:
            return f"Expected key=value, got: {arg}"
        key, value = arg.split("=", 1)
        data[key.strip().replace("-", "_")] = value

    business, errors = await session.add_business(data)
    if business is None:
        return "Business not created:\n" + "\n".join(f"  {k}: {v}" for k, v in errors.items())
    return f"Created {business.name} (id={business.id}) and selected it."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show the user, selected business and task counts.")
registry.register("businesses", cmd_businesses, help_text="List your businesses.", aliases=["biz"])
registry.register("select", cmd_select, help_text="Select a business: /select <number|id>.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [status].")
registry.register("tips", cmd_tips, help_text="List tips for the selected business.")
registry.register("generate", cmd_generate, help_text="Generate new tasks for the selected business.")
registry.register("move", cmd_move, help_text="Change task status: /move <task_id> <status>.")
registry.register(
    "add-business",
    cmd_add_business,
    help_text='Add a business: /add-business name="..." type=... location=... industry=... size=... description="..."',
)
