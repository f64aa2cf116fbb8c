"""
Online presence repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete as sa_delete
from sqlmodel import select

from ..base import as_utc, utc_now
from ..entities.online_users import OnlineUser
from .base import AsyncCrudRepository


class OnlineUserRepository(AsyncCrudRepository[OnlineUser]):
    """Repository for chat heartbeats."""

    def __init__(self, session) -> None:
        super().__init__(session, OnlineUser)

    async def touch(self, user_id: str, username: str, now: Optional[datetime] = None) -> OnlineUser:
        """Insert or refresh the heartbeat row of a user."""
        row = await self.get_by_id(user_id)
        if row is None:
            row = OnlineUser(user_id=user_id, username=username)
        row.username = username
        row.last_seen = as_utc(now) if now is not None else utc_now()
        return await self.update(row)

    async def remove(self, user_id: str) -> None:
        await self.session.execute(sa_delete(OnlineUser).where(OnlineUser.user_id == user_id))
        await self.session.commit()

    async def list_except(self, user_id: str) -> List[OnlineUser]:
        """Everyone but ``user_id``, most recently seen first."""
        stmt = select(OnlineUser).where(OnlineUser.user_id != user_id).order_by(OnlineUser.last_seen.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_since(self, since: datetime) -> int:
        return await self._count(select(OnlineUser).where(OnlineUser.last_seen >= as_utc(since)))
