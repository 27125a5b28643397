"""Schedule (calendar event) request/response schemas."""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

ScheduleCategory = Literal["school", "academy", "personal", "family", "general"]


class RecurrenceRequest(BaseModel):
    frequency: Literal["daily", "weekly"]
    days_of_week: list[int] = []  # 0=Sunday..6=Saturday
    end_date: Optional[date] = None

    @field_validator("days_of_week")
    @classmethod
    def _weekdays(cls, value: list[int]) -> list[int]:
        for day in value:
            if not 0 <= day <= 6:
                raise ValueError("weekdays must be 0 (Sunday) to 6 (Saturday)")
        return sorted(set(value))

    @model_validator(mode="after")
    def _weekly_needs_days(self):
        if self.frequency == "weekly" and not self.days_of_week:
            raise ValueError("weekly recurrence needs at least one weekday")
        if self.frequency == "daily":
            self.days_of_week = []
        return self


class ScheduleRequest(BaseModel):
    """Full replacement body for create and update."""

    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    category: ScheduleCategory = "general"
    child_id: Optional[str] = None
    start_date: date
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    is_all_day: bool = False
    color: Optional[str] = None
    recurrence: Optional[RecurrenceRequest] = None

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @model_validator(mode="after")
    def _consistency(self):
        if self.is_all_day:
            self.start_time = None
            self.end_time = None
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        if self.recurrence and self.recurrence.end_date and self.recurrence.end_date < self.start_date:
            raise ValueError("recurrence end_date must not be before start_date")
        return self


class RecurrenceResponse(BaseModel):
    frequency: str
    days_of_week: list[int]
    end_date: Optional[date]


class ScheduleResponse(BaseModel):
    id: str
    family_id: str
    child_id: Optional[str]
    title: str
    description: Optional[str]
    category: str
    start_date: date
    start_time: Optional[str]
    end_time: Optional[str]
    is_all_day: bool
    color: Optional[str]
    created_by: str
    recurrence: Optional[RecurrenceResponse]


class OccurrenceResponse(ScheduleResponse):
    occurrence_date: date


class ScheduleListResponse(BaseModel):
    schedules: list[ScheduleResponse]


class DayScheduleResponse(BaseModel):
    date: date
    schedules: list[ScheduleResponse]


class RangeScheduleResponse(BaseModel):
    start: date
    end: date
    occurrences: list[OccurrenceResponse]
