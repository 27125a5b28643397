"""Common API dependencies: current user extraction, viewer resolution, role checks."""

from typing import Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session, select

from iharu.core.visibility import CHILD, PARENT, FamilyMemberId, Viewer
from iharu.database import get_session
from iharu.models.user import ChildProfile, User
from iharu.utils.security import decode_token

bearer_scheme = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """Extract and validate user from JWT access token."""
    try:
        payload = decode_token(credentials.credentials)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="인증이 필요합니다.",
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
        )

    user = session.get(User, payload["sub"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="사용자를 찾을 수 없습니다.",
        )
    return user


def require_family(user: User = Depends(get_current_user)) -> User:
    """Require the current user to belong to a family."""
    if not user.family_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="가족이 없습니다.")
    return user


def require_parent(user: User = Depends(require_family)) -> User:
    """Require the current user to be a parent."""
    if user.role != PARENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="부모 계정만 사용할 수 있습니다.",
        )
    return user


def resolve_owner_id(user: User, session: Session) -> Optional[FamilyMemberId]:
    """Map a child login to the ChildProfile id records are owned by."""
    if user.role != CHILD:
        return None
    profile_id = session.exec(
        select(ChildProfile.id).where(ChildProfile.linked_user_id == user.id)
    ).first()
    return FamilyMemberId(profile_id) if profile_id else None


def build_viewer(user: User, session: Session, child_id: Optional[str] = None) -> Viewer:
    return Viewer(
        user_id=user.id,
        role=user.role,
        family_id=user.family_id,
        owner_id=resolve_owner_id(user, session),
        # Only parents can pick a child; a child's scope is fixed to itself
        child_filter=FamilyMemberId(child_id) if child_id and user.role == PARENT else None,
    )


def get_viewer(
    child_id: Optional[str] = Query(default=None),
    user: User = Depends(require_family),
    session: Session = Depends(get_session),
) -> Viewer:
    """The core Viewer for this request, with the optional ?child_id filter."""
    return build_viewer(user, session, child_id)
