# src/bizboard/tasks/remote.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.models import Task
from ..data.gateway import DataGateway
from ..data.rows import task_from_row
from .extraction import GenerationError
from .fallback import generate_canned_tasks

logger = logging.getLogger(__name__)


class RemoteTaskGenerator:
    """
    Calls the generation endpoint (api/server.py, or any deployment of it)
    instead of talking to the LLM directly.

    Same contract as TaskGenerator.generate(): never raises, and falls back
    to the canned local tasks when the endpoint fails.
    """

    def __init__(
        self,
        endpoint_url: str,
        gateway: DataGateway,
        *,
        user_id: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 60.0,
    ) -> None:
        self._url = endpoint_url
        self._gateway = gateway
        self._user_id = user_id
        self._http = http_client
        self._timeout = timeout_seconds

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._http is not None:
            return await self._http.post(self._url, json=payload, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._url, json=payload)

    async def generate(self, business_id: str) -> list[Task]:
        try:
            return await self._call(business_id)
        except Exception as e:
            logger.warning("Generation endpoint failed business_id=%s (%s); using canned tasks", business_id, e)
            return await generate_canned_tasks(self._gateway, business_id)

    async def _call(self, business_id: str) -> list[Task]:
        resp = await self._post({"businessId": business_id, "userId": self._user_id})

        try:
            body = resp.json()
        except ValueError as e:
            raise GenerationError(f"Endpoint returned non-JSON body (HTTP {resp.status_code})") from e

        if not isinstance(body, dict):
            raise GenerationError("Endpoint returned an unexpected body")
        if resp.status_code >= 400 or body.get("error"):
            raise GenerationError(f"HTTP {resp.status_code}: {body.get('error') or 'unknown error'}")

        rows = body.get("tasks") or []
        if not isinstance(rows, list):
            raise GenerationError("Endpoint returned tasks in an unexpected shape")

        logger.info("Tasks generated remotely: %s", body.get("message", ""))
        return [task_from_row(row) for row in rows if isinstance(row, dict)]
