"""Family message feed with watermark-based read tracking.

A viewer has one ``last_read_at`` watermark. A message counts as read when
the viewer sent it or it was created at or before the watermark. There is no
per-message read flag.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Session, col, or_, select

from iharu.config import settings
from iharu.core.visibility import Viewer, filter_messages
from iharu.models.message import Message, MessageRead
from iharu.models.user import User
from iharu.schemas.message import MessageResponse

logger = logging.getLogger(__name__)


def _as_utc(dt: datetime) -> datetime:
    """SQLite may hand datetimes back without tz info; those are stored as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def get_watermark(user_id: str, session: Session) -> Optional[datetime]:
    mark = session.get(MessageRead, user_id)
    return _as_utc(mark.last_read_at) if mark else None


def is_read(message: Message, viewer: Viewer, watermark: Optional[datetime]) -> bool:
    if message.from_user_id == viewer.user_id:
        return True
    return watermark is not None and _as_utc(message.created_at) <= watermark


def message_to_response(
    message: Message, viewer: Viewer, watermark: Optional[datetime], sender_name: Optional[str]
) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        family_id=message.family_id,
        from_user_id=message.from_user_id,
        from_user_name=sender_name,
        to_user_id=message.to_user_id,
        content=message.content,
        is_read=is_read(message, viewer, watermark),
        created_at=_as_utc(message.created_at).isoformat(),
    )


def _visible_messages(viewer: Viewer, session: Session, limit: Optional[int] = None) -> list[Message]:
    # Visibility goes into the WHERE clause so the limit only counts visible rows
    query = (
        select(Message)
        .where(Message.family_id == viewer.family_id)
        .where(or_(
            col(Message.to_user_id).is_(None),
            Message.to_user_id == viewer.user_id,
            Message.from_user_id == viewer.user_id,
        ))
        .order_by(col(Message.created_at).desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return filter_messages(session.exec(query).all(), viewer)


def unread_count(viewer: Viewer, session: Session) -> int:
    watermark = get_watermark(viewer.user_id, session)
    return sum(1 for m in _visible_messages(viewer, session) if not is_read(m, viewer, watermark))


def list_messages(
    viewer: Viewer, session: Session, limit: Optional[int] = None
) -> tuple[list[MessageResponse], int, Optional[datetime]]:
    """Newest first. Returns (messages, unread_count, watermark)."""
    limit = min(limit or settings.message_list_limit, settings.message_list_limit)
    messages = _visible_messages(viewer, session, limit)
    watermark = get_watermark(viewer.user_id, session)

    sender_ids = {m.from_user_id for m in messages}
    names = {}
    if sender_ids:
        names = dict(session.exec(
            select(User.id, User.name).where(col(User.id).in_(sender_ids))
        ).all())

    responses = [
        message_to_response(m, viewer, watermark, names.get(m.from_user_id))
        for m in messages
    ]
    return responses, unread_count(viewer, session), watermark


def send_message(user: User, viewer: Viewer, content: str, to_user_id: Optional[str], session: Session) -> MessageResponse:
    """Raises LookupError when the recipient is not in the sender's family."""
    if to_user_id is not None:
        recipient = session.get(User, to_user_id)
        if not recipient or recipient.family_id != user.family_id:
            raise LookupError("받는 사람을 찾을 수 없습니다.")

    message = Message(
        family_id=user.family_id,
        from_user_id=user.id,
        to_user_id=to_user_id,
        content=content,
    )
    session.add(message)
    session.commit()
    session.refresh(message)
    return message_to_response(message, viewer, get_watermark(user.id, session), user.name)


def delete_message(user: User, message_id: str, session: Session) -> None:
    """Only the sender may delete. Raises LookupError / PermissionError."""
    message = session.get(Message, message_id)
    if not message or message.family_id != user.family_id:
        raise LookupError("메시지를 찾을 수 없습니다.")
    if message.from_user_id != user.id:
        raise PermissionError("자신이 보낸 메시지만 삭제할 수 있습니다.")
    session.delete(message)
    session.commit()


def mark_read(viewer: Viewer, session: Session, until: Optional[datetime] = None) -> datetime:
    """Advance the viewer's watermark; it never moves backwards or past now."""
    now = datetime.now(timezone.utc)
    target = min(_as_utc(until), now) if until else now
    mark = session.get(MessageRead, viewer.user_id)
    if mark is None:
        mark = MessageRead(user_id=viewer.user_id, last_read_at=target)
    elif target > _as_utc(mark.last_read_at):
        mark.last_read_at = target
    session.add(mark)
    session.commit()
    session.refresh(mark)
    return _as_utc(mark.last_read_at)
