"""
One-time token repositories.

E-mail verification and password reset tokens follow the same rules: a new
token for an address replaces any earlier one, lookups go by token, and
"active" means not yet expired.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy import delete as sa_delete
from sqlmodel import select

from ..base import as_utc, utc_now
from ..entities.auth_tokens import EmailVerification, OneTimeTokenBase, PasswordReset
from .base import AsyncCrudRepository

TokenType = TypeVar("TokenType", bound=OneTimeTokenBase)


class OneTimeTokenRepository(AsyncCrudRepository[TokenType], Generic[TokenType]):
    """Shared data access for one-time token tables."""

    def __init__(self, session, model: Type[TokenType]) -> None:
        super().__init__(session, model)

    async def issue(
        self, email: str, token: str, ttl_minutes: int, user_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> TokenType:
        """Store ``token`` as the only live token for ``email``."""
        email = (email or "").lower()
        now = as_utc(now) if now is not None else utc_now()
        await self.session.execute(sa_delete(self.model).where(self.model.email == email))
        row = self.model(email=email, token=str(token), user_id=user_id, expires_at=now + timedelta(minutes=ttl_minutes))
        return await self.create(row)

    async def find_by_token(self, token: str) -> Optional[TokenType]:
        """Look a token up regardless of expiry."""
        stmt = select(self.model).where(self.model.token == str(token)).order_by(self.model.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def find_active_by_token(self, token: str, now: Optional[datetime] = None) -> Optional[TokenType]:
        now = as_utc(now) if now is not None else utc_now()
        stmt = (
            select(self.model)
            .where(self.model.token == str(token), self.model.expires_at > now)
            .order_by(self.model.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def find_active_by_email(self, email: str, now: Optional[datetime] = None) -> Optional[TokenType]:
        now = as_utc(now) if now is not None else utc_now()
        stmt = (
            select(self.model)
            .where(self.model.email == (email or "").lower(), self.model.expires_at > now)
            .order_by(self.model.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def delete_by_token(self, token: str) -> None:
        await self.session.execute(sa_delete(self.model).where(self.model.token == str(token)))
        await self.session.commit()

    async def delete_by_email(self, email: str) -> None:
        await self.session.execute(sa_delete(self.model).where(self.model.email == (email or "").lower()))
        await self.session.commit()


class EmailVerificationRepository(OneTimeTokenRepository[EmailVerification]):
    """Repository for e-mail verification tokens."""

    def __init__(self, session) -> None:
        super().__init__(session, EmailVerification)


class PasswordResetRepository(OneTimeTokenRepository[PasswordReset]):
    """Repository for password reset tokens."""

    def __init__(self, session) -> None:
        super().__init__(session, PasswordReset)
