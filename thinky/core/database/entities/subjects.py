"""
Subject entity models.

A subject groups the reviewers a student writes for one course.
"""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class SubjectBase(Base):
    """Base fields for a subject."""

    name: str = Field(max_length=256, description="Subject name")
    description: str = Field(default="", description="Short description")
    school: str = Field(max_length=256, description="School the subject belongs to")


class Subject(SubjectBase, table=True):
    """Persistent subject owned by a user.

    Table: subjects
    """

    __tablename__ = "subjects"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Subject(id={self.id}, name={self.name}, user_id={self.user_id})"
