"""System status API endpoints."""

from fastapi import APIRouter, Depends
from sqlmodel import Session, func, select

from iharu.api.deps import get_current_user
from iharu.config import settings
from iharu.database import get_session
from iharu.models.user import Family, User

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/ping")
def system_ping():
    """Lightweight health check (no auth required)."""
    return {"status": "ok"}


@router.get("/status")
def system_status(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Server info with basic counts."""
    family_count = session.exec(select(func.count()).select_from(Family)).one()
    user_count = session.exec(select(func.count()).select_from(User)).one()
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "timezone": settings.timezone,
        "family_count": family_count,
        "user_count": user_count,
    }
