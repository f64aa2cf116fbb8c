"""
Moderation report repository.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import or_
from sqlmodel import select

from ..entities.reports import Report
from .base import AsyncCrudRepository


class ReportRepository(AsyncCrudRepository[Report]):
    """Repository for moderation reports."""

    default_order = Report.created_at.desc()

    def __init__(self, session) -> None:
        super().__init__(session, Report)

    def _open_filter(self):
        return or_(Report.status == "open", Report.status.is_(None))

    async def list_open(self) -> List[Report]:
        """Reports still waiting for a decision, newest first."""
        stmt = select(Report).where(self._open_filter()).order_by(Report.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_open(self) -> int:
        return await self._count(select(Report).where(self._open_filter()))
