"""
One-time token entities for e-mail verification and password resets.

Both tables share a layout: at most one live row per e-mail address, looked
up by token and expiring at ``expires_at``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class OneTimeTokenBase(Base):
    """Base fields shared by e-mail verification and password reset rows."""

    email: str = Field(max_length=320, index=True)
    token: str = Field(max_length=128, unique=True, index=True)
    user_id: Optional[str] = Field(default=None, max_length=36)
    expires_at: datetime


class EmailVerification(OneTimeTokenBase, table=True):
    """Pending e-mail verification link.

    Table: email_verifications
    """

    __tablename__ = "email_verifications"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now)


class PasswordReset(OneTimeTokenBase, table=True):
    """Pending password reset link.

    Table: password_resets
    """

    __tablename__ = "password_resets"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now)
