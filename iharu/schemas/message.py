"""Family message schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class MessageCreateRequest(BaseModel):
    content: str = Field(max_length=1000)
    to_user_id: Optional[str] = None

    @field_validator("content")
    @classmethod
    def _content(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message content must not be blank")
        return value


class MessageResponse(BaseModel):
    id: str
    family_id: str
    from_user_id: str
    from_user_name: Optional[str]
    to_user_id: Optional[str]
    content: str
    is_read: bool
    created_at: str


class MessageListResponse(BaseModel):
    messages: list[MessageResponse]
    unread_count: int
    last_read_at: Optional[str]


class MarkReadRequest(BaseModel):
    until: Optional[datetime] = None  # defaults to now


class MarkReadResponse(BaseModel):
    last_read_at: str
    unread_count: int
