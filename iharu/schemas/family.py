"""Family, invite and child profile schemas."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class FamilyInfo(BaseModel):
    id: str
    name: str
    parent_invite_code: Optional[str] = None


class FamilyMemberResponse(BaseModel):
    id: str
    name: str
    role: str
    color: Optional[str]


class ChildProfileResponse(BaseModel):
    id: str
    name: str
    color: str
    invite_code: str
    linked_user_id: Optional[str]
    linked_user_name: Optional[str] = None
    is_linked: bool


class FamilyResponse(BaseModel):
    family: FamilyInfo
    members: list[FamilyMemberResponse]
    children: list[ChildProfileResponse]


class InviteJoinRequest(BaseModel):
    invite_code: str = Field(min_length=5, max_length=32)

    @field_validator("invite_code")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()


class InviteJoinResponse(BaseModel):
    family: FamilyInfo
    child_profile: Optional[ChildProfileResponse] = None
    message: str


class InviteCodeResponse(BaseModel):
    parent_invite_code: str


class ChildCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
