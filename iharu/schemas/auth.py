"""Account and authentication request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if "@" not in value:
        raise ValueError("invalid email address")
    return value


# --- Signup / Login ---

class SignupRequest(BaseModel):
    email: str
    password: str
    name: str = Field(min_length=1, max_length=50)
    role: Literal["parent", "child"]

    normalize_email = field_validator("email")(_normalize_email)


class LoginRequest(BaseModel):
    email: str
    password: str

    normalize_email = field_validator("email")(_normalize_email)


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    family_id: Optional[str]
    color: Optional[str]
    child_profile_id: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    message: str


# --- Password Reset ---

class ForgotPasswordRequest(BaseModel):
    email: str

    normalize_email = field_validator("email")(_normalize_email)


class ResetPasswordRequest(BaseModel):
    email: str
    token: str = Field(min_length=1)
    new_password: str

    normalize_email = field_validator("email")(_normalize_email)


class StatusResponse(BaseModel):
    success: bool = True
    message: str
