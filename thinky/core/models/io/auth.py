"""
Authentication and account I/O models.

Request fields are optional on purpose: the handlers answer missing values
with the specific messages the front end shows.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..base import BaseSchema, UtcDateTime


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class EmailRequest(BaseModel):
    """Body of resend-verification and forgot-password."""

    email: Optional[str] = None


class PasswordResetRequest(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    username: Optional[str] = None
    display_name: Optional[str] = None


class UserSummary(BaseSchema):
    """Identity returned after login."""

    id: str
    email: str
    username: str
    role: str


class UserProfile(UserSummary):
    """The caller's own account as returned by ``/api/auth/me``."""

    display_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    created_at: UtcDateTime
    is_dev: bool = False


class PublicProfile(BaseSchema):
    """What anyone may see about a user."""

    id: str
    username: str
    display_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    created_at: UtcDateTime
    is_dev: bool = False
