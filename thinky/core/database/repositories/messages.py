"""
Chat message repository.

Queries return the newest rows first; callers reverse them when they need
chronological order.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import and_, or_
from sqlalchemy import update as sa_update
from sqlmodel import select

from ..base import as_utc
from ..entities.messages import Message
from ..entities.reports import Report
from .base import AsyncCrudRepository


class MessageRepository(AsyncCrudRepository[Message]):
    """Repository for chat messages."""

    default_order = Message.created_at.desc()

    def __init__(self, session) -> None:
        super().__init__(session, Message)

    async def list_room(self, chat_type: str, limit: int) -> List[Message]:
        """Newest messages of a room."""
        stmt = (
            select(Message)
            .where(Message.chat_type == chat_type)
            .order_by(Message.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_conversation(self, user_id: str, other_id: str, limit: int) -> List[Message]:
        """Newest private messages exchanged between two users, in either direction."""
        stmt = (
            select(Message)
            .where(
                Message.chat_type == "private",
                or_(
                    and_(Message.user_id == user_id, Message.recipient_id == other_id),
                    and_(Message.user_id == other_id, Message.recipient_id == user_id),
                ),
            )
            .order_by(Message.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_inbox(self, user_id: str, limit: int) -> List[Message]:
        """Newest private messages addressed to a user."""
        stmt = (
            select(Message)
            .where(Message.chat_type == "private", Message.recipient_id == user_id)
            .order_by(Message.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_general_since(self, user_id: str, since: datetime) -> int:
        """General-room messages from other users newer than ``since``."""
        stmt = select(Message).where(
            Message.chat_type == "general",
            Message.user_id != user_id,
            Message.created_at > as_utc(since),
        )
        return await self._count(stmt)

    async def count_private_since(self, user_id: str, since: datetime) -> int:
        """Private messages to ``user_id`` newer than ``since``."""
        stmt = select(Message).where(
            Message.chat_type == "private",
            Message.recipient_id == user_id,
            Message.created_at > as_utc(since),
        )
        return await self._count(stmt)

    async def count(self) -> int:
        return await self._count(select(Message))

    async def delete(self, entity_id: str) -> bool:
        """Delete a message; reports against it keep their history."""
        message = await self.get_by_id(entity_id)
        if message is None:
            return False
        await self.session.execute(sa_update(Report).where(Report.message_id == entity_id).values(message_id=None))
        await self.session.delete(message)
        await self.session.commit()
        return True
