"""
Administration I/O models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..base import BaseSchema, UtcDateTime


class RoleUpdate(BaseModel):
    role: Optional[str] = None


class AdminUserRead(BaseSchema):
    """Account row as shown in the admin user table."""

    id: str
    email: str
    username: str
    role: str
    is_verified: bool
    display_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    created_at: UtcDateTime
    banned_until: Optional[UtcDateTime] = None
    blocked_from_creating_until: Optional[UtcDateTime] = None
    muted_until: Optional[UtcDateTime] = None
    chat_banned_until: Optional[UtcDateTime] = None
    warning_count: int = 0


class Analytics(BaseModel):
    total_users: int
    total_students: int
    total_admins: int
    total_moderators: int
    total_subjects: int
    total_reviewers: int
    total_messages: int
    open_reports: int
    current_online_users: int
