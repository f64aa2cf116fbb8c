"""
Moderation report entity.

A report flags either a reviewer (``type="reviewer"``) or a chat message
(``type="chat"``). The reported user is captured when the report is filed so
the report stays actionable after the content itself is removed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Text
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Report(Base, table=True):
    """A user-submitted moderation report.

    Table: reports
    """

    __tablename__ = "reports"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    type: str = Field(default="reviewer", max_length=16, description="reviewer or chat")
    reviewer_id: Optional[str] = Field(
        default=None, foreign_key="reviewers.id", ondelete="SET NULL", index=True, max_length=36
    )
    message_id: Optional[str] = Field(
        default=None, foreign_key="messages.id", ondelete="SET NULL", index=True, max_length=36
    )
    reported_user_id: Optional[str] = Field(default=None, index=True, max_length=36)
    reporter_id: Optional[str] = Field(default=None, index=True, max_length=36)
    report_type: str = Field(max_length=64)
    details: Optional[str] = Field(default=None, sa_type=Text)

    status: Optional[str] = Field(default="open", max_length=16, index=True)
    action_taken_by: Optional[str] = Field(default=None, max_length=36)
    action_taken: Optional[str] = Field(default=None, sa_type=Text)
    action_taken_at: Optional[datetime] = Field(default=None)
    resolved_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Report(id={self.id}, type={self.type}, status={self.status})"
