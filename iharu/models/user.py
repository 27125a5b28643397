"""User, Family and ChildProfile models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Family(SQLModel, table=True):
    __tablename__ = "families"

    id: str = Field(default_factory=lambda: f"fam_{secrets.token_hex(4)}", primary_key=True)
    name: str = Field(default="우리 가족")
    invite_code: str = Field(unique=True, index=True)  # PRNTxxxx
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: f"usr_{secrets.token_hex(4)}", primary_key=True)
    family_id: Optional[str] = Field(default=None, foreign_key="families.id", index=True)
    email: str = Field(unique=True, index=True)
    name: str
    password_hash: str
    role: str = Field(default="parent")  # 'parent' | 'child'
    color: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChildProfile(SQLModel, table=True):
    """A child as the family sees it. Its id is the canonical owner id on
    schedules and preparations, whether or not a login is linked yet."""

    __tablename__ = "child_profiles"

    id: str = Field(default_factory=lambda: f"chd_{secrets.token_hex(4)}", primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    name: str
    color: str
    invite_code: str = Field(unique=True, index=True)  # CHLDxxxx
    linked_user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
