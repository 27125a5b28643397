"""Account business logic: signup, login, password reset, account deletion."""

import logging
from datetime import datetime, timedelta, timezone

from sqlmodel import Session, or_, select

from iharu.config import settings
from iharu.core.visibility import PARENT
from iharu.models.message import Message, MessageRead
from iharu.models.preparation import Preparation
from iharu.models.reset_token import PasswordResetToken
from iharu.models.schedule import Schedule
from iharu.models.user import ChildProfile, Family, User
from iharu.schemas.auth import UserResponse
from iharu.services.schedule_service import delete_schedule_rows
from iharu.utils.mailer import send_reset_code
from iharu.utils.security import (
    PARENT_INVITE_PREFIX,
    create_access_token,
    generate_invite_code,
    generate_reset_code,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

PARENT_COLOR = "#FF6B6B"
CHILD_COLORS = ["#4ECDC4", "#A18CD1", "#FFB347", "#87CEEB", "#FF6B6B"]

RESET_REQUESTED_MESSAGE = "이메일이 존재하면 비밀번호 재설정 코드가 발송됩니다."


def next_child_color(index: int) -> str:
    return CHILD_COLORS[index % len(CHILD_COLORS)]


def unique_invite_code(prefix: str, session: Session) -> str:
    """Generate an invite code not used by any family or child profile."""
    while True:
        code = generate_invite_code(prefix)
        taken = session.exec(select(Family.id).where(Family.invite_code == code)).first()
        if taken is None:
            taken = session.exec(
                select(ChildProfile.id).where(ChildProfile.invite_code == code)
            ).first()
        if taken is None:
            return code


def _check_password(password: str) -> None:
    if len(password) < settings.password_min_length:
        raise ValueError(f"비밀번호는 {settings.password_min_length}자 이상이어야 합니다.")


def user_to_response(user: User, session: Session) -> UserResponse:
    profile_id = None
    if user.role != PARENT:
        profile_id = session.exec(
            select(ChildProfile.id).where(ChildProfile.linked_user_id == user.id)
        ).first()
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        family_id=user.family_id,
        color=user.color,
        child_profile_id=profile_id,
    )


def signup(email: str, password: str, name: str, role: str, session: Session) -> tuple[User, str]:
    """Create an account. Parents get a new family with a parent invite code.

    Returns (user, access_token). Raises ValueError for a taken email or a
    short password.
    """
    _check_password(password)

    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise ValueError("이미 가입된 이메일입니다.")

    user = User(
        email=email,
        name=name,
        password_hash=hash_password(password),
        role=role,
        color=PARENT_COLOR if role == PARENT else next_child_color(0),
    )

    if role == PARENT:
        family = Family(
            name=f"{name}의 가족",
            invite_code=unique_invite_code(PARENT_INVITE_PREFIX, session),
            created_by=user.id,
        )
        session.add(family)
        session.flush()
        user.family_id = family.id

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("New %s account %s (family=%s)", role, user.id, user.family_id)
    return user, create_access_token(user.id, user.family_id, user.role)


def login(email: str, password: str, session: Session) -> tuple[User, str]:
    """Raises PermissionError with one message for unknown email and wrong password."""
    user = session.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(password, user.password_hash):
        raise PermissionError("이메일 또는 비밀번호가 올바르지 않습니다.")
    return user, create_access_token(user.id, user.family_id, user.role)


def request_password_reset(email: str, session: Session) -> None:
    """Issue a fresh reset code for an existing account and mail it.

    Silently does nothing for unknown emails so callers can always answer
    with the same message.
    """
    user = session.exec(select(User).where(User.email == email)).first()
    if not user:
        return

    for old in session.exec(
        select(PasswordResetToken).where(PasswordResetToken.user_id == user.id)
    ).all():
        session.delete(old)

    code = generate_reset_code()
    session.add(PasswordResetToken(
        user_id=user.id,
        token=code,
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.reset_token_expire_minutes),
    ))
    session.commit()

    send_reset_code(user.email, user.name, code)


def reset_password(email: str, token: str, new_password: str, session: Session) -> None:
    """Raises ValueError for unknown accounts, wrong/used codes and expired codes."""
    _check_password(new_password)

    user = session.exec(select(User).where(User.email == email)).first()
    if not user:
        raise ValueError("유효하지 않은 요청입니다.")

    reset = session.exec(
        select(PasswordResetToken).where(
            PasswordResetToken.user_id == user.id,
            PasswordResetToken.token == token,
            PasswordResetToken.used == False,  # noqa: E712
        )
    ).first()
    if not reset:
        raise ValueError("유효하지 않은 인증 코드입니다.")

    # Compare as naive UTC (SQLite stores without tz info)
    expires = reset.expires_at
    if expires.tzinfo is not None:
        expires = expires.astimezone(timezone.utc).replace(tzinfo=None)
    if datetime.now(timezone.utc).replace(tzinfo=None) > expires:
        raise ValueError("인증 코드가 만료되었습니다. 다시 요청해주세요.")

    user.password_hash = hash_password(new_password)
    user.updated_at = datetime.now(timezone.utc)
    reset.used = True
    session.add(user)
    session.add(reset)
    session.commit()
    logger.info("Password reset for %s", user.id)


def delete_account(user: User, session: Session) -> None:
    """Delete a user and what they created.

    Runs step by step, committing each; a failure part-way leaves earlier
    steps applied.
    """
    user_id = user.id

    for message in session.exec(
        select(Message).where(or_(Message.from_user_id == user_id, Message.to_user_id == user_id))
    ).all():
        session.delete(message)
    watermark = session.get(MessageRead, user_id)
    if watermark:
        session.delete(watermark)
    session.commit()

    for prep in session.exec(select(Preparation).where(Preparation.created_by == user_id)).all():
        session.delete(prep)
    session.commit()

    schedules = session.exec(select(Schedule).where(Schedule.created_by == user_id)).all()
    delete_schedule_rows(schedules, session)
    session.commit()

    for profile in session.exec(
        select(ChildProfile).where(ChildProfile.linked_user_id == user_id)
    ).all():
        profile.linked_user_id = None
        session.add(profile)
    for token in session.exec(
        select(PasswordResetToken).where(PasswordResetToken.user_id == user_id)
    ).all():
        session.delete(token)
    session.commit()

    session.delete(user)
    session.commit()
    logger.info("Deleted account %s", user_id)
