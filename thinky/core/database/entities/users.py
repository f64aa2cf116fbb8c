"""
User entity models.

This module contains the database entity for student, moderator and admin
accounts, including the moderation state (bans, restrictions, mutes) that the
authentication guard and content endpoints consult on every request.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class UserBase(Base):
    """Base fields for a user account."""

    email: str = Field(max_length=320, unique=True, index=True, description="Lower-cased e-mail address")
    username: str = Field(max_length=64, unique=True, index=True, description="Public handle")
    role: str = Field(default="student", max_length=16, description="student, moderator or admin")
    is_verified: bool = Field(default=False, description="Whether the e-mail address was confirmed")
    display_name: Optional[str] = Field(default=None, max_length=128)
    profile_picture_url: Optional[str] = Field(default=None)
    is_dev: bool = Field(default=False, description="Shows the developer badge on profiles")


class User(UserBase, table=True):
    """Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    password_hash: str = Field(description="Salted password hash")

    # Moderation state
    banned_until: Optional[datetime] = Field(default=None)
    blocked_from_creating_until: Optional[datetime] = Field(default=None)
    muted_until: Optional[datetime] = Field(default=None)
    chat_banned_until: Optional[datetime] = Field(default=None)
    chat_warnings: int = Field(default=0, description="Blocked chat messages since the last mute")
    warning_count: int = Field(default=0, description="Moderator warnings received")

    # Rotated on login when only one session per user is allowed
    session_token: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username}, role={self.role})"
