# src/bizboard/tasks/extraction.py

"""Turning raw model text into task candidates."""

from __future__ import annotations

import json
import re
from datetime import UTC, date, datetime
from typing import Any

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")


class GenerationError(RuntimeError):
    """Task generation could not produce candidates."""


class BusinessNotFoundError(GenerationError):
    pass


class TaskParseError(GenerationError):
    """The model response does not follow the JSON task contract."""


def extract_json_payload(text: str) -> str:
    """
    Pick the JSON part of a model response.

    Priority: a ```json fenced block, then any fenced block, then the whole text.
    """
    raw = text or ""
    m = _FENCED_JSON.search(raw) or _FENCED_ANY.search(raw)
    payload = m.group(1) if m else raw
    return payload.strip()


def parse_task_candidates(text: str) -> list[dict[str, Any]]:
    """
    Parse a model response into a list of task dicts.

    A single object is wrapped into a one-element list. Non-object list items
    are dropped. Anything else (string, number, invalid JSON) raises
    TaskParseError.
    """
    payload = extract_json_payload(text)
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise TaskParseError(f"Failed to parse tasks from LLM response: {e}") from e

    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    raise TaskParseError(f"Response is not an array or object (got {type(data).__name__})")


def normalize_tags(raw: Any) -> list[str]:
    if isinstance(raw, list):
        return [str(t).strip() for t in raw if t is not None and str(t).strip()]
    if isinstance(raw, str) and raw.strip():
        return [raw.strip()]
    return []


def parse_due_date(raw: Any) -> datetime | None:
    """ISO date/datetime -> aware datetime; anything unparseable -> None."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, date):
        dt = datetime(raw.year, raw.month, raw.day)
    else:
        s = str(raw).strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt
