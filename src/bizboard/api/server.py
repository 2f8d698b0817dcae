# src/bizboard/api/server.py

"""
HTTP surface for task generation.

POST /functions/v1/generate-tasks  {"businessId": "...", "userId": "..."}

-> 200 {"success": true, "message": "Generated N tasks", "tasks": [rows]}
-> 400 {"error": "Business ID is required"}
-> 404 {"error": "Business not found"}
-> 500 {"error": "..."}

Uses the strict generator: failures surface as 500 here, the canned
fallback is a client-side concern.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from ..core.state import AppState
from ..data.rows import task_to_row
from ..llm.client import friendly_llm_error_message

logger = logging.getLogger(__name__)

GENERATE_TASKS_PATH = "/functions/v1/generate-tasks"


class GenerateTasksRequest(BaseModel):
    businessId: str | None = None
    userId: str | None = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(state: AppState) -> FastAPI:
    app = FastAPI(title=f"{getattr(state.settings, 'app_name', 'bizboard')} API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    app.state.bizboard = state

    @app.post(GENERATE_TASKS_PATH)
    async def generate_tasks(request: Request) -> JSONResponse:
        try:
            body: Any = await request.json()
            req = GenerateTasksRequest.model_validate(body if isinstance(body, dict) else {})
        except (ValueError, ValidationError):
            return _error(400, "Business ID is required")

        business_id = (req.businessId or "").strip()
        if not business_id:
            return _error(400, "Business ID is required")

        try:
            business = (await state.gateway.get_business(business_id)).value
            if business is None:
                logger.info("generate-tasks: business not found id=%s", business_id)
                return _error(404, "Business not found")

            tasks = await state.generator.generate_for(business)
        except Exception as e:
            logger.exception("Error in generate-tasks business_id=%s", business_id)
            return _error(500, friendly_llm_error_message(e))

        return JSONResponse(
            content={
                "success": True,
                "message": f"Generated {len(tasks)} tasks",
                "tasks": [task_to_row(t) for t in tasks],
            }
        )

    return app
