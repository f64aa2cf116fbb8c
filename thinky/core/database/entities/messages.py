"""
Chat message entity.

Messages belong to a room (``chat_type``). Private messages additionally
carry the recipient; the sender's username is copied onto the row so chat
history renders without a join.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Text
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Message(Base, table=True):
    """A chat message.

    Table: messages
    """

    __tablename__ = "messages"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=36)
    username: str = Field(max_length=64)
    message: str = Field(sa_type=Text)
    chat_type: str = Field(default="general", max_length=32, index=True)
    recipient_id: Optional[str] = Field(default=None, index=True, max_length=36)
    reply_to: Optional[str] = Field(default=None, max_length=36)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Message(id={self.id}, chat_type={self.chat_type}, user_id={self.user_id})"
