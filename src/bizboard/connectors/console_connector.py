# src/bizboard/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.ports import Notification
from ..dashboard.session import DashboardSession, NotificationLog

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _print_notification(n: Notification) -> None:
    prefix = {"destructive": "[!]", "warning": "[~]"}.get(n.variant, "[i]")
    line = f"{prefix} {n.title}"
    if n.description:
        line += f" - {n.description}"
    _print_ts(line)


def _flush_notifications(session: DashboardSession) -> None:
    notifier = session.notifier
    if isinstance(notifier, NotificationLog):
        for n in notifier.drain():
            _print_notification(n)


async def run_console_loop(session: DashboardSession, *, app_name: str = "bizboard") -> None:
    logger.info("Console connector started.")

    await session.load()
    _flush_notifications(session)

    if session.user is not None:
        _print_ts(f"[CONSOLE] Welcome back, {session.user.name}.")
    if session.selected is not None:
        _print_ts(f"[CONSOLE] {app_name}: {session.selected.name}, {len(session.tasks)} tasks.")
    else:
        _print_ts("[CONSOLE] No business yet. Use /add-business to create one.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (e.g., generation).
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = await command_registry.handle(session, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        _flush_notifications(session)

        if response is None:
            response = "Commands start with '/'. Use /help to list them."
        _print_ts(response)

    session.close()
    logger.info("Console connector finished.")
