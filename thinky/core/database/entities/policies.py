"""
Community policy entity.

Policies are the guidelines moderators cite when acting on a report.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Policy(Base, table=True):
    """A community guideline.

    Table: policies
    """

    __tablename__ = "policies"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    title: str = Field(max_length=256)
    description: str = Field(default="", sa_type=Text)
    category: str = Field(default="both", max_length=16, description="reviewer, message or both")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
