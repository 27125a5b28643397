"""Family message API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from iharu.api.deps import get_viewer, require_family
from iharu.core.visibility import Viewer
from iharu.database import get_session
from iharu.models.user import User
from iharu.schemas.auth import StatusResponse
from iharu.schemas.message import (
    MarkReadRequest,
    MarkReadResponse,
    MessageCreateRequest,
    MessageListResponse,
    MessageResponse,
)
from iharu.services.message_service import (
    delete_message,
    list_messages,
    mark_read,
    send_message,
    unread_count,
)

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=MessageListResponse)
def get_messages(
    limit: Optional[int] = Query(default=None, ge=1),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    """Newest first: broadcasts plus messages to or from the caller."""
    messages, unread, watermark = list_messages(viewer, session, limit)
    return MessageListResponse(
        messages=messages,
        unread_count=unread,
        last_read_at=watermark.isoformat() if watermark else None,
    )


@router.post("", response_model=MessageResponse, status_code=201)
def post_message(
    request: MessageCreateRequest,
    user: User = Depends(require_family),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    try:
        return send_message(user, viewer, request.content, request.to_user_id, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/read", response_model=MarkReadResponse)
def read_messages(
    request: Optional[MarkReadRequest] = None,
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    """Move the caller's read watermark forward."""
    watermark = mark_read(viewer, session, request.until if request else None)
    return MarkReadResponse(
        last_read_at=watermark.isoformat(),
        unread_count=unread_count(viewer, session),
    )


@router.delete("/{message_id}", response_model=StatusResponse)
def remove_message(
    message_id: str,
    user: User = Depends(require_family),
    session: Session = Depends(get_session),
):
    try:
        delete_message(user, message_id, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return StatusResponse(message="메시지가 삭제되었습니다.")
