"""
Online presence entity.

Clients post a heartbeat while the chat page is open; ``last_seen`` is the
time of the latest one.
"""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from ..base import Base, utc_now


class OnlineUser(Base, table=True):
    """Heartbeat row for a user currently using chat.

    Table: online_users
    """

    __tablename__ = "online_users"
    __table_args__ = ({"extend_existing": True},)

    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", primary_key=True, max_length=36)
    username: str = Field(max_length=64)
    last_seen: datetime = Field(default_factory=utc_now, index=True)
