"""Preparation (checklist) store with D-day decoration."""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlmodel import Session, col, select

from iharu.core.dday import URGENT_WITHIN_DAYS, dday_label, days_until, is_overdue, is_urgent
from iharu.core.visibility import Viewer, filter_visible, is_visible
from iharu.models.preparation import Preparation
from iharu.models.user import User
from iharu.schemas.preparation import PreparationRequest, PreparationResponse
from iharu.services.schedule_service import check_child_owner, today

logger = logging.getLogger(__name__)


def prep_to_response(prep: Preparation, on: date) -> PreparationResponse:
    return PreparationResponse(
        id=prep.id,
        family_id=prep.family_id,
        child_id=prep.child_id,
        title=prep.title,
        description=prep.description,
        category=prep.category,
        due_date=prep.due_date,
        is_completed=bool(prep.is_completed),
        created_by=prep.created_by,
        dday=dday_label(prep.due_date, on),
        is_urgent=is_urgent(prep.due_date, on),
        is_overdue=is_overdue(prep.due_date, on),
    )


def list_preparations(
    viewer: Viewer,
    session: Session,
    show_completed: bool = True,
    on: Optional[date] = None,
) -> list[PreparationResponse]:
    """Visible items, incomplete first, then by due date."""
    on = on or today()
    query = select(Preparation).where(Preparation.family_id == viewer.family_id)
    if not show_completed:
        query = query.where(Preparation.is_completed == False)  # noqa: E712
    preps = session.exec(query.order_by(col(Preparation.due_date).asc())).all()

    visible = filter_visible(preps, viewer)
    visible.sort(key=lambda p: bool(p.is_completed))
    return [prep_to_response(p, on) for p in visible]


def urgent_preparations(viewer: Viewer, session: Session, on: Optional[date] = None) -> list[PreparationResponse]:
    """Incomplete items due within two days or overdue, soonest first."""
    on = on or today()
    return [
        p for p in list_preparations(viewer, session, show_completed=False, on=on)
        if days_until(p.due_date, on) <= URGENT_WITHIN_DAYS
    ]


def _get_visible(viewer: Viewer, prep_id: str, session: Session) -> Preparation:
    prep = session.get(Preparation, prep_id)
    if not prep or not is_visible(prep, viewer):
        raise LookupError("준비물을 찾을 수 없습니다.")
    return prep


def create_preparation(
    user: User, viewer: Viewer, request: PreparationRequest, session: Session
) -> PreparationResponse:
    check_child_owner(user, viewer, request.child_id, session)

    prep = Preparation(
        family_id=user.family_id,
        child_id=request.child_id,
        title=request.title,
        description=request.description,
        category=request.category,
        due_date=request.due_date,
        created_by=user.id,
    )
    session.add(prep)
    session.commit()
    session.refresh(prep)
    logger.info("Created preparation %s in family %s", prep.id, prep.family_id)
    return prep_to_response(prep, today())


def replace_preparation(
    user: User, viewer: Viewer, prep_id: str, request: PreparationRequest, session: Session
) -> PreparationResponse:
    """Replace title, description, category, child and due date. Completion
    is left alone."""
    prep = _get_visible(viewer, prep_id, session)
    check_child_owner(user, viewer, request.child_id, session)

    prep.title = request.title
    prep.description = request.description
    prep.category = request.category
    prep.child_id = request.child_id
    prep.due_date = request.due_date
    prep.updated_at = datetime.now(timezone.utc)
    session.add(prep)
    session.commit()
    session.refresh(prep)
    return prep_to_response(prep, today())


def toggle_preparation(viewer: Viewer, prep_id: str, session: Session) -> Preparation:
    prep = _get_visible(viewer, prep_id, session)
    prep.is_completed = not prep.is_completed
    prep.updated_at = datetime.now(timezone.utc)
    session.add(prep)
    session.commit()
    session.refresh(prep)
    return prep


def delete_preparation(viewer: Viewer, prep_id: str, session: Session) -> None:
    prep = _get_visible(viewer, prep_id, session)
    session.delete(prep)
    session.commit()
    logger.info("Deleted preparation %s", prep_id)
