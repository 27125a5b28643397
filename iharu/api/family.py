"""Family, invite & child profile API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from iharu.api.deps import get_current_user, require_family, require_parent
from iharu.database import get_session
from iharu.models.user import User
from iharu.schemas.auth import StatusResponse
from iharu.schemas.family import (
    ChildCreateRequest,
    ChildProfileResponse,
    FamilyResponse,
    InviteCodeResponse,
    InviteJoinRequest,
    InviteJoinResponse,
)
from iharu.services.family_service import (
    add_child,
    child_to_response,
    family_info,
    get_child,
    get_family_overview,
    join_family,
    list_children,
    regenerate_parent_code,
    remove_child,
)

router = APIRouter(tags=["family"])


@router.get("/family", response_model=FamilyResponse)
def get_family(
    user: User = Depends(require_family),
    session: Session = Depends(get_session),
):
    """Get family info with members and child profiles."""
    try:
        return get_family_overview(user, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/family/join", response_model=InviteJoinResponse)
def join(
    request: InviteJoinRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Join a family with a parent code, or link a child account with a child code."""
    try:
        family, profile = join_family(user, request.invite_code, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return InviteJoinResponse(
        family=family_info(family, include_code=profile is None),
        child_profile=child_to_response(profile, session) if profile else None,
        message="가족에 참여했습니다.",
    )


@router.post("/family/invite-code/regenerate", response_model=InviteCodeResponse)
def regenerate_invite_code(
    user: User = Depends(require_parent),
    session: Session = Depends(get_session),
):
    """Issue a new parent invite code. The old one stops working."""
    try:
        code = regenerate_parent_code(user, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return InviteCodeResponse(parent_invite_code=code)


@router.get("/children", response_model=list[ChildProfileResponse])
def get_children(
    user: User = Depends(require_family),
    session: Session = Depends(get_session),
):
    return [child_to_response(c, session) for c in list_children(user.family_id, session)]


@router.post("/children", response_model=ChildProfileResponse, status_code=201)
def create_child(
    request: ChildCreateRequest,
    user: User = Depends(require_parent),
    session: Session = Depends(get_session),
):
    """Add a child profile with its own CHLD invite code. Parent only."""
    profile = add_child(user, request.name, request.color, session)
    return child_to_response(profile, session)


@router.get("/children/{child_id}", response_model=ChildProfileResponse)
def get_child_profile(
    child_id: str,
    user: User = Depends(require_family),
    session: Session = Depends(get_session),
):
    try:
        profile = get_child(user, child_id, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return child_to_response(profile, session)


@router.delete("/children/{child_id}", response_model=StatusResponse)
def delete_child_profile(
    child_id: str,
    user: User = Depends(require_parent),
    session: Session = Depends(get_session),
):
    """Remove a child profile and its schedules and preparations. Parent only."""
    try:
        remove_child(user, child_id, session)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return StatusResponse(message="자녀가 삭제되었습니다.")
