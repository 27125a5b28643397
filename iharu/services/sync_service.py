"""One-shot snapshot for polling clients."""

import hashlib
import json
from datetime import date
from typing import Optional

from sqlmodel import Session

from iharu.config import settings
from iharu.core.visibility import Viewer
from iharu.models.user import User
from iharu.schemas.sync import SyncResponse
from iharu.services.family_service import get_family_overview
from iharu.services.message_service import list_messages
from iharu.services.preparation_service import list_preparations
from iharu.services.schedule_service import day_schedules, today


def content_version(payload: dict) -> str:
    """Stable fingerprint of snapshot content (not for security)."""
    raw = json.dumps(payload, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


def build_snapshot(user: User, viewer: Viewer, session: Session, day: Optional[date] = None) -> SyncResponse:
    day = day or today()
    family = get_family_overview(user, session)
    schedules = day_schedules(viewer, day, session)
    preparations = list_preparations(viewer, session)
    messages, unread, _ = list_messages(viewer, session)

    content = {
        "date": day.isoformat(),
        "family": family.model_dump(mode="json"),
        "schedules": [s.model_dump(mode="json") for s in schedules],
        "preparations": [p.model_dump(mode="json") for p in preparations],
        "messages": [m.model_dump(mode="json") for m in messages],
        "unread_count": unread,
    }

    return SyncResponse(
        version=content_version(content),
        app_version=settings.app_version,
        date=day,
        poll_interval_seconds=settings.sync_poll_interval_seconds,
        family=family,
        schedules=schedules,
        preparations=preparations,
        messages=messages,
        unread_count=unread,
    )
