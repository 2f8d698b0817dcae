# src/bizboard/core/forms.py

"""Business form validation.

Field rules mirror the onboarding form: short text fields need at least two
characters, the description ten, the founded year must be a plausible past
year and the website (if given) an http(s) URL.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import BusinessSize


class BusinessForm(BaseModel):
    name: str = Field(min_length=2)
    type: str = Field(min_length=2)
    location: str = Field(min_length=2)
    industry: str = Field(min_length=2)
    size: BusinessSize
    description: str = Field(min_length=10)
    founded_year: int | None = None
    website: str | None = None
    logo_url: str | None = None

    @field_validator("name", "type", "location", "industry", "description", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("founded_year", mode="before")
    @classmethod
    def _blank_year(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("founded_year")
    @classmethod
    def _year_range(cls, v: int | None) -> int | None:
        if v is None:
            return v
        current = datetime.now().year
        if v < 1800 or v > current:
            raise ValueError(f"Founded year must be between 1800 and {current}")
        return v

    @field_validator("website")
    @classmethod
    def _website(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if not v.startswith(("http://", "https://")) or "." not in v.split("://", 1)[1]:
            raise ValueError("Must be a valid URL")
        return v


_MESSAGES = {
    "name": "Business name must be at least 2 characters",
    "type": "Business type must be at least 2 characters",
    "location": "Location must be at least 2 characters",
    "industry": "Industry must be at least 2 characters",
    "description": "Description must be at least 10 characters",
    "size": "Size must be one of: " + ", ".join(s.value for s in BusinessSize),
}


def validate_business_form(
    data: Mapping[str, Any],
) -> tuple[BusinessForm | None, dict[str, str]]:
    """
    Validate raw form input.

    Returns (form, {}) on success or (None, {field: message}) with one message
    per failing field.
    """
    try:
        return BusinessForm.model_validate(dict(data)), {}
    except ValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            loc = err.get("loc") or ("form",)
            field_name = str(loc[0])
            if field_name in errors:
                continue
            msg = _MESSAGES.get(field_name)
            if msg is None:
                msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
            errors[field_name] = msg
        return None, errors
