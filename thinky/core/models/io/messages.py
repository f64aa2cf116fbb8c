"""
Chat message I/O models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..base import BaseSchema, UtcDateTime


class MessageCreate(BaseModel):
    message: Optional[str] = None
    chat_type: Optional[str] = None
    recipient_id: Optional[str] = None
    reply_to: Optional[str] = None


class SenderSummary(BaseSchema):
    username: str
    profile_picture_url: Optional[str] = None


class MessageRead(BaseSchema):
    id: str
    user_id: str
    username: str
    message: str
    chat_type: str
    recipient_id: Optional[str] = None
    reply_to: Optional[str] = None
    created_at: UtcDateTime
    users: Optional[SenderSummary] = None


class UnreadCounts(BaseModel):
    general: int
    private: int


class OnlineUserRead(BaseSchema):
    user_id: str
    username: str
    last_seen: UtcDateTime
