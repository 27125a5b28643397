"""Password reset code model."""

import secrets
from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class PasswordResetToken(SQLModel, table=True):
    __tablename__ = "password_reset_tokens"

    id: str = Field(default_factory=lambda: f"rst_{secrets.token_hex(4)}", primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    token: str  # 6-digit code
    expires_at: datetime
    used: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
