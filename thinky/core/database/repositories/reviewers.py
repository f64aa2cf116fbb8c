"""
Reviewer repository.

Provides the owner-scoped listing used by a student's subject page and the
public feeds used by guests, the dashboard and user profiles.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete as sa_delete
from sqlalchemy import or_
from sqlalchemy import update as sa_update
from sqlmodel import select

from ..base import as_utc, utc_now
from ..entities.reactions import Reaction
from ..entities.reports import Report
from ..entities.reviewers import Reviewer
from .base import AsyncCrudRepository, QueryBuilder


class ReviewerRepository(AsyncCrudRepository[Reviewer]):
    """Repository for reviewers."""

    default_order = Reviewer.created_at.desc()

    def __init__(self, session) -> None:
        super().__init__(session, Reviewer)

    async def get_owned(self, reviewer_id: str, user_id: str) -> Optional[Reviewer]:
        reviewer = await self.get_by_id(reviewer_id)
        if reviewer is None or reviewer.user_id != user_id:
            return None
        return reviewer

    async def list_for_subject(
        self,
        subject_id: str,
        user_id: str,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Reviewer], int]:
        """One page of a user's own reviewers in a subject, plus the total count."""
        stmt = select(Reviewer).where(Reviewer.subject_id == subject_id, Reviewer.user_id == user_id)
        stmt = QueryBuilder.apply_search(stmt, [Reviewer.title, Reviewer.content], search)
        stmt = stmt.order_by(Reviewer.created_at.desc())
        return await self._page(stmt, limit, offset)

    async def list_public(
        self,
        search: Optional[str] = None,
        author_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[List[Reviewer], int]:
        """Public reviewers that are not currently hidden by moderation."""
        now = as_utc(now) if now is not None else utc_now()
        stmt = select(Reviewer).where(
            Reviewer.is_public == True,  # noqa: E712
            or_(Reviewer.hidden_until.is_(None), Reviewer.hidden_until <= now),
        )
        if author_id:
            stmt = stmt.where(Reviewer.user_id == author_id)
        stmt = QueryBuilder.apply_search(stmt, [Reviewer.title, Reviewer.content], search)
        stmt = stmt.order_by(Reviewer.created_at.desc())
        return await self._page(stmt, limit, offset)

    async def count(self) -> int:
        return await self._count(select(Reviewer))

    async def delete(self, entity_id: str) -> bool:
        """Delete a reviewer and its reactions; reports keep their history."""
        reviewer = await self.get_by_id(entity_id)
        if reviewer is None:
            return False
        await self.session.execute(sa_delete(Reaction).where(Reaction.reviewer_id == entity_id))
        await self.session.execute(sa_update(Report).where(Report.reviewer_id == entity_id).values(reviewer_id=None))
        await self.session.delete(reviewer)
        await self.session.commit()
        return True
