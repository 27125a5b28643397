"""Calendar event store and occurrence queries.

Rows are loaded per family, converted to ScheduleResponse objects and handed
to the pure core (visibility + occurrence expansion). Filtering happens here,
server-side, before anything leaves the process.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from sqlmodel import Session, col, select

from iharu.config import settings
from iharu.core.dday import local_today
from iharu.core.occurrences import occurrences_between, occurrences_on, upcoming
from iharu.core.visibility import CHILD, Viewer, filter_visible, is_visible
from iharu.models.schedule import Recurrence, Schedule
from iharu.models.user import ChildProfile, User
from iharu.schemas.schedule import (
    OccurrenceResponse,
    RecurrenceResponse,
    ScheduleRequest,
    ScheduleResponse,
)

logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 62


def today() -> date:
    return local_today(settings.timezone)


def _load_days(raw: str) -> Optional[list[int]]:
    try:
        days = json.loads(raw or "[]")
    except json.JSONDecodeError:
        return None
    if not isinstance(days, list) or not all(isinstance(d, int) and not isinstance(d, bool) for d in days):
        return None
    return days


def recurrence_to_response(row: Optional[Recurrence]) -> Optional[RecurrenceResponse]:
    """Unreadable stored weekday data drops the rule, leaving only the anchor date."""
    if row is None:
        return None
    days = _load_days(row.days_of_week)
    if days is None:
        logger.warning("Unreadable weekdays on recurrence %s: %r", row.id, row.days_of_week)
        return None
    return RecurrenceResponse(frequency=row.frequency, days_of_week=days, end_date=row.end_date)


def schedule_to_response(schedule: Schedule, recurrence: Optional[Recurrence]) -> ScheduleResponse:
    return ScheduleResponse(
        id=schedule.id,
        family_id=schedule.family_id,
        child_id=schedule.child_id,
        title=schedule.title,
        description=schedule.description,
        category=schedule.category,
        start_date=schedule.start_date,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        is_all_day=bool(schedule.is_all_day),
        color=schedule.color,
        created_by=schedule.created_by,
        recurrence=recurrence_to_response(recurrence),
    )


def load_family_schedules(family_id: str, session: Session) -> list[ScheduleResponse]:
    """All events of a family with their rules, ordered by anchor date and time."""
    schedules = session.exec(
        select(Schedule)
        .where(Schedule.family_id == family_id)
        .order_by(col(Schedule.start_date).asc(), col(Schedule.start_time).asc())
    ).all()
    if not schedules:
        return []

    recurrences = session.exec(
        select(Recurrence).where(col(Recurrence.schedule_id).in_([s.id for s in schedules]))
    ).all()
    by_schedule = {r.schedule_id: r for r in recurrences}
    return [schedule_to_response(s, by_schedule.get(s.id)) for s in schedules]


def list_schedules(viewer: Viewer, session: Session, on_date: Optional[date] = None) -> list[ScheduleResponse]:
    """Stored events visible to the viewer; ``on_date`` keeps exact anchor matches only."""
    schedules = filter_visible(load_family_schedules(viewer.family_id, session), viewer)
    if on_date is not None:
        schedules = [s for s in schedules if s.start_date == on_date]
    return schedules


def day_schedules(viewer: Viewer, day: date, session: Session) -> list[ScheduleResponse]:
    events = filter_visible(load_family_schedules(viewer.family_id, session), viewer)
    return [o.event for o in occurrences_on(events, day, viewer.scope())]


def _with_date(occurrences: Iterable) -> list[OccurrenceResponse]:
    return [
        OccurrenceResponse(**o.event.model_dump(), occurrence_date=o.date)
        for o in occurrences
    ]


def range_schedules(viewer: Viewer, start: date, end: date, session: Session) -> list[OccurrenceResponse]:
    """Per-date occurrences for [start, end]. Raises ValueError for bad ranges."""
    if end < start:
        raise ValueError("end must not be before start")
    if (end - start).days + 1 > MAX_RANGE_DAYS:
        raise ValueError(f"range is limited to {MAX_RANGE_DAYS} days")

    events = filter_visible(load_family_schedules(viewer.family_id, session), viewer)
    return _with_date(occurrences_between(events, start, end, viewer.scope()))


def upcoming_schedules(viewer: Viewer, days: int, session: Session) -> list[OccurrenceResponse]:
    events = filter_visible(load_family_schedules(viewer.family_id, session), viewer)
    return _with_date(upcoming(events, today(), days, viewer.scope()))


def check_child_owner(user: User, viewer: Viewer, child_id: Optional[str], session: Session) -> None:
    """The owning child must be a profile of the same family; child accounts
    may only assign records to themselves or to the whole family."""
    if child_id is None:
        return
    profile = session.get(ChildProfile, child_id)
    if not profile or profile.family_id != user.family_id:
        raise LookupError("자녀를 찾을 수 없습니다.")
    if user.role == CHILD and child_id != viewer.owner_id:
        raise PermissionError("자신의 항목만 등록할 수 있습니다.")


def _store_recurrence(schedule_id: str, request: ScheduleRequest, session: Session) -> None:
    if request.recurrence is None:
        return
    session.add(Recurrence(
        schedule_id=schedule_id,
        frequency=request.recurrence.frequency,
        days_of_week=json.dumps(request.recurrence.days_of_week),
        end_date=request.recurrence.end_date,
    ))


def _get_visible(viewer: Viewer, schedule_id: str, session: Session) -> Schedule:
    schedule = session.get(Schedule, schedule_id)
    if not schedule or not is_visible(schedule, viewer):
        raise LookupError("일정을 찾을 수 없습니다.")
    return schedule


def _response_for(schedule: Schedule, session: Session) -> ScheduleResponse:
    recurrence = session.exec(
        select(Recurrence).where(Recurrence.schedule_id == schedule.id)
    ).first()
    return schedule_to_response(schedule, recurrence)


def create_schedule(user: User, viewer: Viewer, request: ScheduleRequest, session: Session) -> ScheduleResponse:
    check_child_owner(user, viewer, request.child_id, session)

    schedule = Schedule(
        family_id=user.family_id,
        child_id=request.child_id,
        title=request.title,
        description=request.description,
        category=request.category,
        start_date=request.start_date,
        start_time=request.start_time,
        end_time=request.end_time,
        is_all_day=request.is_all_day,
        color=request.color,
        created_by=user.id,
    )
    session.add(schedule)
    session.flush()
    _store_recurrence(schedule.id, request, session)
    session.commit()
    session.refresh(schedule)

    logger.info("Created schedule %s in family %s", schedule.id, schedule.family_id)
    return _response_for(schedule, session)


def replace_schedule(
    user: User, viewer: Viewer, schedule_id: str, request: ScheduleRequest, session: Session
) -> ScheduleResponse:
    """Full replace, recurrence included: the old rule is removed and the new
    one (if any) inserted."""
    schedule = _get_visible(viewer, schedule_id, session)
    check_child_owner(user, viewer, request.child_id, session)

    schedule.title = request.title
    schedule.description = request.description
    schedule.category = request.category
    schedule.child_id = request.child_id
    schedule.start_date = request.start_date
    schedule.start_time = request.start_time
    schedule.end_time = request.end_time
    schedule.is_all_day = request.is_all_day
    schedule.color = request.color
    schedule.updated_at = datetime.now(timezone.utc)
    session.add(schedule)

    for old in session.exec(select(Recurrence).where(Recurrence.schedule_id == schedule.id)).all():
        session.delete(old)
    session.flush()
    _store_recurrence(schedule.id, request, session)
    session.commit()
    session.refresh(schedule)
    return _response_for(schedule, session)


def delete_schedule_rows(schedules: Iterable[Schedule], session: Session) -> None:
    """Delete events together with their recurrence rows. Caller commits."""
    for schedule in schedules:
        for recurrence in session.exec(
            select(Recurrence).where(Recurrence.schedule_id == schedule.id)
        ).all():
            session.delete(recurrence)
        session.flush()
        session.delete(schedule)


def delete_schedule(viewer: Viewer, schedule_id: str, session: Session) -> None:
    schedule = _get_visible(viewer, schedule_id, session)
    delete_schedule_rows([schedule], session)
    session.commit()
    logger.info("Deleted schedule %s", schedule_id)
