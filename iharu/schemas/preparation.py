"""Preparation (checklist item) request/response schemas."""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

PreparationCategory = Literal["school", "academy", "exam", "general"]


class PreparationRequest(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    category: PreparationCategory = "general"
    child_id: Optional[str] = None
    due_date: date

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value


class PreparationResponse(BaseModel):
    id: str
    family_id: str
    child_id: Optional[str]
    title: str
    description: Optional[str]
    category: str
    due_date: date
    is_completed: bool
    created_by: str
    dday: str
    is_urgent: bool
    is_overdue: bool


class PreparationListResponse(BaseModel):
    preparations: list[PreparationResponse]


class ToggleResponse(BaseModel):
    id: str
    is_completed: bool
    message: str
