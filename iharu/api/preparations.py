"""Preparation (checklist) API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from iharu.api.deps import get_viewer, require_family
from iharu.core.visibility import Viewer
from iharu.database import get_session
from iharu.models.user import User
from iharu.schemas.auth import StatusResponse
from iharu.schemas.preparation import (
    PreparationListResponse,
    PreparationRequest,
    PreparationResponse,
    ToggleResponse,
)
from iharu.services.preparation_service import (
    create_preparation,
    delete_preparation,
    list_preparations,
    replace_preparation,
    toggle_preparation,
    urgent_preparations,
)

router = APIRouter(prefix="/preparations", tags=["preparations"])


@router.get("", response_model=PreparationListResponse)
def get_preparations(
    show_completed: bool = Query(default=True),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    """Visible items with D-day labels, incomplete first."""
    return PreparationListResponse(
        preparations=list_preparations(viewer, session, show_completed=show_completed)
    )


@router.get("/urgent", response_model=PreparationListResponse)
def get_urgent(
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    return PreparationListResponse(preparations=urgent_preparations(viewer, session))


@router.post("", response_model=PreparationResponse, status_code=201)
def add_preparation(
    request: PreparationRequest,
    user: User = Depends(require_family),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    try:
        return create_preparation(user, viewer, request, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.put("/{prep_id}", response_model=PreparationResponse)
def update_preparation(
    prep_id: str,
    request: PreparationRequest,
    user: User = Depends(require_family),
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    try:
        return replace_preparation(user, viewer, prep_id, request, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.patch("/{prep_id}/toggle", response_model=ToggleResponse)
def toggle(
    prep_id: str,
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    """Flip the completion flag."""
    try:
        prep = toggle_preparation(viewer, prep_id, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ToggleResponse(
        id=prep.id,
        is_completed=prep.is_completed,
        message="완료되었습니다." if prep.is_completed else "완료가 취소되었습니다.",
    )


@router.delete("/{prep_id}", response_model=StatusResponse)
def remove_preparation(
    prep_id: str,
    viewer: Viewer = Depends(get_viewer),
    session: Session = Depends(get_session),
):
    try:
        delete_preparation(viewer, prep_id, session)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return StatusResponse(message="준비물이 삭제되었습니다.")
