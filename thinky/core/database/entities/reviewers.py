"""
Reviewer entity models.

A reviewer is a user-authored study document (rich text plus optional
flashcards) filed under one of the author's subjects. Flashcards are stored
inline as a JSON list of ``{id, front, back, is_public, uploader_id}``
objects because they are always read and written together with their
reviewer.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Text
from sqlmodel import Field

from ..base import Base, as_utc, new_id, utc_now


class ReviewerBase(Base):
    """Base fields for a reviewer."""

    title: str = Field(max_length=512, description="Reviewer title")
    content: str = Field(sa_type=Text, description="Rich text (HTML) body")
    is_public: bool = Field(default=True, description="Listed in public feeds")


class Reviewer(ReviewerBase, table=True):
    """Persistent reviewer.

    Table: reviewers
    """

    __tablename__ = "reviewers"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=36)
    subject_id: str = Field(foreign_key="subjects.id", ondelete="CASCADE", index=True, max_length=36)
    flashcards: Optional[List[Dict[str, Any]]] = Field(default=None, sa_type=JSON)

    # Set by moderators; hidden reviewers drop out of public feeds until then
    hidden_until: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def is_hidden(self, now: datetime) -> bool:
        return self.hidden_until is not None and as_utc(self.hidden_until) > as_utc(now)

    def __repr__(self) -> str:
        return f"Reviewer(id={self.id}, title={self.title}, user_id={self.user_id})"
