"""
Subject repository.

Subjects are private to their owner, so every lookup here is scoped by user.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import update as sa_update
from sqlmodel import select

from ..entities.reactions import Reaction
from ..entities.reports import Report
from ..entities.reviewers import Reviewer
from ..entities.subjects import Subject
from .base import AsyncCrudRepository


class SubjectRepository(AsyncCrudRepository[Subject]):
    """Repository for subjects."""

    default_order = Subject.created_at.desc()

    def __init__(self, session) -> None:
        super().__init__(session, Subject)

    async def list_for_user(self, user_id: str) -> List[Subject]:
        """All subjects of a user, newest first."""
        stmt = select(Subject).where(Subject.user_id == user_id).order_by(Subject.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_owned(self, subject_id: str, user_id: str) -> Optional[Subject]:
        subject = await self.get_by_id(subject_id)
        if subject is None or subject.user_id != user_id:
            return None
        return subject

    async def delete(self, entity_id: str) -> bool:
        """Delete a subject and the reviewers filed under it."""
        subject = await self.get_by_id(entity_id)
        if subject is None:
            return False
        reviewer_ids = select(Reviewer.id).where(Reviewer.subject_id == entity_id)
        await self.session.execute(sa_delete(Reaction).where(Reaction.reviewer_id.in_(reviewer_ids)))
        await self.session.execute(
            sa_update(Report).where(Report.reviewer_id.in_(reviewer_ids)).values(reviewer_id=None)
        )
        await self.session.execute(sa_delete(Reviewer).where(Reviewer.subject_id == entity_id))
        await self.session.delete(subject)
        await self.session.commit()
        return True

    async def count(self) -> int:
        return await self._count(select(Subject))
