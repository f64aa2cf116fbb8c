"""
Verified school repository.
"""

from __future__ import annotations

from typing import List

from sqlmodel import select

from ..entities.schools import VerifiedSchool
from .base import AsyncCrudRepository


class SchoolRepository(AsyncCrudRepository[VerifiedSchool]):
    """Repository for the curated school list."""

    default_order = VerifiedSchool.name

    def __init__(self, session) -> None:
        super().__init__(session, VerifiedSchool)

    async def list_by_name(self) -> List[VerifiedSchool]:
        result = await self.session.execute(select(VerifiedSchool).order_by(VerifiedSchool.name))
        return list(result.scalars().all())
