"""Schedule (calendar event) and Recurrence models."""

import secrets
from datetime import date, datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Schedule(SQLModel, table=True):
    __tablename__ = "schedules"

    id: str = Field(default_factory=lambda: f"sch_{secrets.token_hex(4)}", primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    child_id: Optional[str] = Field(default=None, foreign_key="child_profiles.id", index=True)
    title: str
    description: Optional[str] = None
    category: str = Field(default="general")
    start_date: date = Field(index=True)
    start_time: Optional[str] = None  # "HH:MM"
    end_time: Optional[str] = None  # "HH:MM"
    is_all_day: bool = Field(default=False)
    color: Optional[str] = None
    created_by: str = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Recurrence(SQLModel, table=True):
    __tablename__ = "recurrences"

    id: str = Field(default_factory=lambda: f"rec_{secrets.token_hex(4)}", primary_key=True)
    schedule_id: str = Field(foreign_key="schedules.id", unique=True, index=True)
    frequency: str  # 'daily' | 'weekly'
    days_of_week: str = "[]"  # JSON array, 0=Sunday..6=Saturday
    end_date: Optional[date] = None
