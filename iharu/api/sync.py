"""Polling snapshot endpoint.

Clients poll this every ``poll_interval_seconds`` and compare ``version``
with what they hold; an unchanged version means nothing to redraw.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from iharu.api.deps import get_viewer, require_family
from iharu.core.visibility import Viewer
from iharu.database import get_session
from iharu.models.user import User
from iharu.schemas.sync import SyncResponse
from iharu.services.sync_service import build_snapshot

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("", response_model=SyncResponse)
def get_snapshot(
    day: Optional[date] = Query(default=None, alias="date"),
    user: User = Depends(require_family),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    return build_snapshot(user, viewer, session, day)
