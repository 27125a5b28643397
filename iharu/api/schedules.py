"""Schedule (calendar) API endpoints."""

from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from iharu.api.deps import get_viewer, require_family
from iharu.core.visibility import Viewer
from iharu.database import get_session
from iharu.models.user import User
from iharu.schemas.auth import StatusResponse
from iharu.schemas.schedule import (
    DayScheduleResponse,
    RangeScheduleResponse,
    ScheduleListResponse,
    ScheduleRequest,
    ScheduleResponse,
)
from iharu.services.schedule_service import (
    create_schedule,
    day_schedules,
    delete_schedule,
    list_schedules,
    range_schedules,
    replace_schedule,
    today,
    upcoming_schedules,
)

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.get("", response_model=ScheduleListResponse)
def get_schedules(
    date_filter: Optional[date] = Query(default=None, alias="date"),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    """Stored events visible to the caller. ``date`` keeps events anchored on that day."""
    return ScheduleListResponse(schedules=list_schedules(viewer, session, on_date=date_filter))


@router.get("/day", response_model=DayScheduleResponse)
def get_day(
    day: Optional[date] = Query(default=None, alias="date"),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    """Events occurring on a date (default: today), recurrences expanded."""
    day = day or today()
    return DayScheduleResponse(date=day, schedules=day_schedules(viewer, day, session))


@router.get("/range", response_model=RangeScheduleResponse)
def get_range(
    start: date,
    end: date,
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    try:
        occurrences = range_schedules(viewer, start, end, session)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RangeScheduleResponse(start=start, end=end, occurrences=occurrences)


@router.get("/upcoming", response_model=RangeScheduleResponse)
def get_upcoming(
    days: int = Query(default=7, ge=1, le=31),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    """Occurrences on the next ``days`` days, today excluded."""
    start = today()
    occurrences = upcoming_schedules(viewer, days, session)
    return RangeScheduleResponse(
        start=start + timedelta(days=1),
        end=start + timedelta(days=days),
        occurrences=occurrences,
    )


@router.post("", response_model=ScheduleResponse, status_code=201)
def add_schedule(
    request: ScheduleRequest,
    user: User = Depends(require_family),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    try:
        return create_schedule(user, viewer, request, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.put("/{schedule_id}", response_model=ScheduleResponse)
def update_schedule(
    schedule_id: str,
    request: ScheduleRequest,
    user: User = Depends(require_family),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    """Replace an event, including its recurrence rule."""
    try:
        return replace_schedule(user, viewer, schedule_id, request, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.delete("/{schedule_id}", response_model=StatusResponse)
def remove_schedule(
    schedule_id: str,
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    try:
        delete_schedule(viewer, schedule_id, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return StatusResponse(message="일정이 삭제되었습니다.")
