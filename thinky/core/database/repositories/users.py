"""
User repository.

Data access for accounts, including the lookups used by authentication and
the explicit clean-up of a user's content on deletion.
"""

from __future__ import annotations

from typing import Dict, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, or_
from sqlalchemy import update as sa_update
from sqlmodel import select

from ..entities.messages import Message
from ..entities.online_users import OnlineUser
from ..entities.reactions import Reaction
from ..entities.reports import Report
from ..entities.reviewers import Reviewer
from ..entities.subjects import Subject
from ..entities.users import User
from .base import AsyncCrudRepository


class UserRepository(AsyncCrudRepository[User]):
    """Repository for user accounts."""

    default_order = User.created_at.desc()

    def __init__(self, session) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == (email or "").lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def find_by_email_or_username(self, email: str, username: str) -> Optional[User]:
        """Return the first account that already uses either identifier."""
        stmt = select(User).where(or_(User.email == (email or "").lower(), User.username == username))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def count_by_role(self) -> Dict[str, int]:
        stmt = select(User.role, func.count()).group_by(User.role)
        result = await self.session.execute(stmt)
        return {role: int(count) for role, count in result.all()}

    async def count(self) -> int:
        return await self._count(select(User))

    async def delete(self, entity_id: str) -> bool:
        """Delete a user together with everything they own.

        Child rows are removed explicitly so the result is the same whether or
        not the database enforces ``ON DELETE CASCADE``.
        """
        user = await self.get_by_id(entity_id)
        if user is None:
            return False

        reviewer_ids = select(Reviewer.id).where(Reviewer.user_id == entity_id)
        await self.session.execute(sa_delete(Reaction).where(Reaction.reviewer_id.in_(reviewer_ids)))
        await self.session.execute(
            sa_update(Report).where(Report.reviewer_id.in_(reviewer_ids)).values(reviewer_id=None)
        )
        await self.session.execute(sa_delete(Reaction).where(Reaction.user_id == entity_id))
        await self.session.execute(sa_delete(Reviewer).where(Reviewer.user_id == entity_id))
        await self.session.execute(sa_delete(Subject).where(Subject.user_id == entity_id))
        message_ids = select(Message.id).where(Message.user_id == entity_id)
        await self.session.execute(
            sa_update(Report).where(Report.message_id.in_(message_ids)).values(message_id=None)
        )
        await self.session.execute(sa_delete(Message).where(Message.user_id == entity_id))
        await self.session.execute(sa_delete(OnlineUser).where(OnlineUser.user_id == entity_id))
        await self.session.delete(user)
        await self.session.commit()
        return True
