"""
Moderation I/O models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..base import BaseSchema, UtcDateTime
from .messages import MessageRead
from .reviewers import ReportRead


class ModerationActionRequest(BaseModel):
    """A moderator's decision on a report.

    ``until`` is an ISO timestamp or a duration such as ``24h``, ``7d`` or
    ``permanent``.
    """

    action: Optional[str] = None
    until: Optional[str] = None
    note: Optional[str] = None


class ModerationUser(BaseSchema):
    id: str
    username: str
    email: Optional[str] = None


class ReportedReviewer(BaseSchema):
    id: str
    title: str
    user_id: str
    subject_id: str
    users: Optional[ModerationUser] = None


class ModerationItem(ReportRead):
    """An open report with the content and people it concerns."""

    reviewers: Optional[ReportedReviewer] = None
    message: Optional[MessageRead] = None
    reporter: Optional[ModerationUser] = None
    action_user: Optional[ModerationUser] = None
    reported_at: Optional[UtcDateTime] = None
