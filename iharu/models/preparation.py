"""Preparation (due-dated checklist item) model."""

import secrets
from datetime import date, datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Preparation(SQLModel, table=True):
    __tablename__ = "preparations"

    id: str = Field(default_factory=lambda: f"prp_{secrets.token_hex(4)}", primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    child_id: Optional[str] = Field(default=None, foreign_key="child_profiles.id", index=True)
    title: str
    description: Optional[str] = None
    category: str = Field(default="general")
    due_date: date = Field(index=True)
    is_completed: bool = Field(default=False)
    created_by: str = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
