"""Polling snapshot schema."""

from datetime import date

from pydantic import BaseModel

from iharu.schemas.family import FamilyResponse
from iharu.schemas.message import MessageResponse
from iharu.schemas.preparation import PreparationResponse
from iharu.schemas.schedule import ScheduleResponse


class SyncResponse(BaseModel):
    version: str  # content hash; unchanged data gives the same version
    app_version: str
    date: date
    poll_interval_seconds: int
    family: FamilyResponse
    schedules: list[ScheduleResponse]  # occurrences on `date`
    preparations: list[PreparationResponse]
    messages: list[MessageResponse]
    unread_count: int
