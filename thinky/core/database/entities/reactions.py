"""
Reaction entity.

One row per (reviewer, user, reaction type); toggling a reaction inserts or
deletes that row.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Reaction(Base, table=True):
    """A user's reaction to a reviewer.

    Table: reactions
    """

    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint("reviewer_id", "user_id", "reaction_type", name="uq_reactions_reviewer_user_type"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    reviewer_id: str = Field(foreign_key="reviewers.id", ondelete="CASCADE", index=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=36)
    reaction_type: str = Field(default="heart", max_length=32)
    created_at: datetime = Field(default_factory=utc_now)
