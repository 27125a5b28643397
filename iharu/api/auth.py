"""Account & authentication API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from iharu.api.deps import get_current_user
from iharu.database import get_session
from iharu.models.user import User
from iharu.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    StatusResponse,
    UserResponse,
)
from iharu.services.auth_service import (
    RESET_REQUESTED_MESSAGE,
    delete_account,
    login,
    request_password_reset,
    reset_password,
    signup,
    user_to_response,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup_user(request: SignupRequest, session: Session = Depends(get_session)):
    """Register a parent (creates a family) or a child account."""
    try:
        user, token = signup(request.email, request.password, request.name, request.role, session)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return AuthResponse(
        user=user_to_response(user, session),
        token=token,
        message="회원가입이 완료되었습니다.",
    )


@router.post("/login", response_model=AuthResponse)
def login_user(request: LoginRequest, session: Session = Depends(get_session)):
    try:
        user, token = login(request.email, request.password, session)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return AuthResponse(user=user_to_response(user, session), token=token, message="로그인 성공")


@router.get("/me", response_model=UserResponse)
def get_me(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Get current user's profile."""
    return user_to_response(user, session)


@router.delete("/me", response_model=StatusResponse)
def delete_me(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Delete the account and the records it created."""
    delete_account(user, session)
    return StatusResponse(message="회원 탈퇴가 완료되었습니다.")


@router.post("/forgot-password", response_model=StatusResponse)
def forgot_password(request: ForgotPasswordRequest, session: Session = Depends(get_session)):
    """Always the same answer, whether or not the email exists."""
    request_password_reset(request.email, session)
    return StatusResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=StatusResponse)
def reset_password_with_code(request: ResetPasswordRequest, session: Session = Depends(get_session)):
    try:
        reset_password(request.email, request.token, request.new_password, session)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return StatusResponse(message="비밀번호가 성공적으로 변경되었습니다.")
