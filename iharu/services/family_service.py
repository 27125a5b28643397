"""Family, invite code and child profile business logic."""

import logging

from sqlmodel import Session, func, select

from iharu.core.visibility import CHILD
from iharu.models.preparation import Preparation
from iharu.models.schedule import Schedule
from iharu.models.user import ChildProfile, Family, User
from iharu.schemas.family import (
    ChildProfileResponse,
    FamilyInfo,
    FamilyMemberResponse,
    FamilyResponse,
)
from iharu.services.auth_service import next_child_color, unique_invite_code
from iharu.services.schedule_service import delete_schedule_rows
from iharu.utils.security import (
    CHILD_INVITE_PREFIX,
    LEGACY_PARENT_INVITE_PREFIX,
    PARENT_INVITE_PREFIX,
)

logger = logging.getLogger(__name__)

PARENT_CODE_PREFIXES = (PARENT_INVITE_PREFIX, LEGACY_PARENT_INVITE_PREFIX)


def child_to_response(profile: ChildProfile, session: Session) -> ChildProfileResponse:
    linked_name = None
    if profile.linked_user_id:
        linked = session.get(User, profile.linked_user_id)
        linked_name = linked.name if linked else None
    return ChildProfileResponse(
        id=profile.id,
        name=profile.name,
        color=profile.color,
        invite_code=profile.invite_code,
        linked_user_id=profile.linked_user_id,
        linked_user_name=linked_name,
        is_linked=bool(profile.linked_user_id),
    )


def family_info(family: Family, include_code: bool = True) -> FamilyInfo:
    return FamilyInfo(
        id=family.id,
        name=family.name,
        parent_invite_code=family.invite_code if include_code else None,
    )


def list_children(family_id: str, session: Session) -> list[ChildProfile]:
    return list(session.exec(
        select(ChildProfile)
        .where(ChildProfile.family_id == family_id)
        .order_by(ChildProfile.created_at)
    ).all())


def get_family_overview(user: User, session: Session) -> FamilyResponse:
    """Family info, members and child profiles. Raises LookupError."""
    family = session.get(Family, user.family_id) if user.family_id else None
    if not family:
        raise LookupError("가족을 찾을 수 없습니다.")

    members = session.exec(
        select(User).where(User.family_id == family.id).order_by(User.created_at)
    ).all()

    return FamilyResponse(
        # Child accounts do not get the parent invite code
        family=family_info(family, include_code=user.role != CHILD),
        members=[
            FamilyMemberResponse(id=m.id, name=m.name, role=m.role, color=m.color)
            for m in members
        ],
        children=[child_to_response(c, session) for c in list_children(family.id, session)],
    )


def join_family(user: User, invite_code: str, session: Session) -> tuple[Family, ChildProfile | None]:
    """Join with a parent code (PRNT/HARU) or link a child account (CHLD).

    Returns (family, linked profile or None). Raises ValueError for any
    rejected code.
    """
    code = invite_code.upper()

    if user.family_id:
        raise ValueError("이미 가족에 참여되어 있습니다.")

    if code.startswith(PARENT_CODE_PREFIXES):
        family = session.exec(select(Family).where(Family.invite_code == code)).first()
        if not family:
            raise ValueError("유효하지 않은 초대 코드입니다.")

        user.family_id = family.id
        session.add(user)
        session.commit()
        logger.info("User %s joined family %s", user.id, family.id)
        return family, None

    if code.startswith(CHILD_INVITE_PREFIX):
        if user.role != CHILD:
            raise ValueError("자녀 초대 코드는 자녀 계정만 사용할 수 있습니다.")

        profile = session.exec(select(ChildProfile).where(ChildProfile.invite_code == code)).first()
        if not profile:
            raise ValueError("유효하지 않은 초대 코드입니다.")
        if profile.linked_user_id:
            raise ValueError("이미 다른 사용자가 연결된 초대 코드입니다.")

        family = session.get(Family, profile.family_id)
        if not family:
            raise LookupError("가족을 찾을 수 없습니다.")

        profile.linked_user_id = user.id
        user.family_id = profile.family_id
        user.color = profile.color
        session.add(profile)
        session.add(user)
        session.commit()
        session.refresh(profile)
        logger.info("User %s linked to child profile %s", user.id, profile.id)
        return family, profile

    raise ValueError("유효하지 않은 초대 코드 형식입니다.")


def regenerate_parent_code(user: User, session: Session) -> str:
    family = session.get(Family, user.family_id)
    if not family:
        raise LookupError("가족을 찾을 수 없습니다.")
    family.invite_code = unique_invite_code(PARENT_INVITE_PREFIX, session)
    session.add(family)
    session.commit()
    return family.invite_code


def add_child(user: User, name: str, color: str | None, session: Session) -> ChildProfile:
    count = session.exec(
        select(func.count()).select_from(ChildProfile).where(ChildProfile.family_id == user.family_id)
    ).one()

    profile = ChildProfile(
        family_id=user.family_id,
        name=name,
        color=color or next_child_color(count),
        invite_code=unique_invite_code(CHILD_INVITE_PREFIX, session),
        created_by=user.id,
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    logger.info("Added child profile %s to family %s", profile.id, user.family_id)
    return profile


def get_child(user: User, child_id: str, session: Session) -> ChildProfile:
    profile = session.get(ChildProfile, child_id)
    if not profile or profile.family_id != user.family_id:
        raise LookupError("자녀를 찾을 수 없습니다.")
    return profile


def remove_child(user: User, child_id: str, session: Session) -> None:
    """Delete a child profile with its schedules and preparations.

    Dependents go first, one statement group at a time, without a
    surrounding transaction.
    """
    profile = get_child(user, child_id, session)

    schedules = session.exec(select(Schedule).where(Schedule.child_id == child_id)).all()
    delete_schedule_rows(schedules, session)
    session.commit()

    for prep in session.exec(select(Preparation).where(Preparation.child_id == child_id)).all():
        session.delete(prep)
    session.commit()

    session.delete(profile)
    session.commit()
    logger.info("Removed child profile %s from family %s", child_id, user.family_id)
