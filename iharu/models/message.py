"""Message and read-watermark models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: str = Field(default_factory=lambda: f"msg_{secrets.token_hex(4)}", primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    from_user_id: str = Field(foreign_key="users.id", index=True)
    to_user_id: Optional[str] = Field(default=None, foreign_key="users.id")  # None = whole family
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)


class MessageRead(SQLModel, table=True):
    """Per-user last-read watermark. Messages at or before it count as read."""

    __tablename__ = "message_reads"

    user_id: str = Field(foreign_key="users.id", primary_key=True)
    last_read_at: datetime
