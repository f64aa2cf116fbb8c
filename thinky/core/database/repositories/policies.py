"""
Community policy repository.
"""

from __future__ import annotations

from typing import List

from sqlmodel import select

from ..entities.policies import Policy
from .base import AsyncCrudRepository


class PolicyRepository(AsyncCrudRepository[Policy]):
    """Repository for community guidelines."""

    def __init__(self, session) -> None:
        super().__init__(session, Policy)

    async def list_ordered(self) -> List[Policy]:
        result = await self.session.execute(select(Policy).order_by(Policy.category, Policy.title))
        return list(result.scalars().all())
