"""
Reaction repository.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel import select

from ..entities.reactions import Reaction
from .base import AsyncCrudRepository


class ReactionRepository(AsyncCrudRepository[Reaction]):
    """Repository for reviewer reactions."""

    def __init__(self, session) -> None:
        super().__init__(session, Reaction)

    async def list_for_reviewer(self, reviewer_id: str, reaction_type: Optional[str] = None) -> List[Reaction]:
        stmt = select(Reaction).where(Reaction.reviewer_id == reviewer_id)
        if reaction_type:
            stmt = stmt.where(Reaction.reaction_type == reaction_type)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find(self, reviewer_id: str, user_id: str, reaction_type: str) -> Optional[Reaction]:
        stmt = select(Reaction).where(
            Reaction.reviewer_id == reviewer_id,
            Reaction.user_id == user_id,
            Reaction.reaction_type == reaction_type,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def toggle(self, reviewer_id: str, user_id: str, reaction_type: str) -> bool:
        """Add the reaction if absent, remove it otherwise.

        Returns:
            True when the user now has the reaction, False when it was removed
        """
        existing = await self.find(reviewer_id, user_id, reaction_type)
        if existing is not None:
            await self.session.delete(existing)
            await self.session.commit()
            return False
        await self.create(Reaction(reviewer_id=reviewer_id, user_id=user_id, reaction_type=reaction_type))
        return True
