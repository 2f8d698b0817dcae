# src/bizboard/tasks/lifecycle.py

from __future__ import annotations

import logging

from ..core.models import Task, TaskStatus
from ..data.gateway import DataGateway

logger = logging.getLogger(__name__)


class TaskLifecycle:
    """
    Status transitions for tasks.

    There is no transition table: any status may follow any other
    (completed -> pending reopens a task). The gateway keeps `completed_at`
    in step with the status.
    """

    def __init__(self, gateway: DataGateway) -> None:
        self._gateway = gateway

    async def set_status(self, task_id: str, new_status: TaskStatus | str) -> Task | None:
        # Unknown status strings are a caller error (ValueError).
        status = TaskStatus(new_status)

        current = (await self._gateway.get_task(task_id)).value
        if current is None:
            logger.info("set_status: task not found id=%s", task_id)
            return None

        if current.status == status:
            logger.debug("set_status: task %s already %s", task_id, status.value)
            return current

        logger.debug("set_status: task %s %s -> %s", task_id, current.status.value, status.value)
        return (await self._gateway.update_task_status(task_id, status)).value
