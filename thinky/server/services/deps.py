"""
Request dependencies.

Provides the repository bundle for a request and the session based
authentication guards. The signed session cookie carries ``user_id``,
``username``, ``role`` and, in single-session mode, ``session_token``.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from thinky.core.database import get_session
from thinky.core.database.entities.users import User
from thinky.core.database.repositories import SqlRepoBundle, build_sql_repos
from thinky.core.models import to_iso
from thinky.server.core import constant
from thinky.server.core.config import settings

from .security import is_active, is_permanent


async def get_repos(session: AsyncSession = Depends(get_session)) -> SqlRepoBundle:
    return build_sql_repos(session=session)


RepoDep = Annotated[SqlRepoBundle, Depends(get_repos)]


def start_session(request: Request, user: User) -> None:
    """Store the logged-in user in the session cookie."""
    request.session.clear()
    request.session.update(
        {
            "user_id": user.id,
            "username": user.username,
            "role": user.role,
        }
    )
    if user.session_token:
        request.session["session_token"] = user.session_token


def clear_session(request: Request) -> None:
    request.session.clear()


def ban_message(user: User) -> str:
    if is_permanent(user.banned_until):
        return "Account permanently banned"
    return f"Account banned until {to_iso(user.banned_until)}"


async def get_optional_user(request: Request, repos: RepoDep) -> Optional[User]:
    """The session user if there is one; never raises."""
    user_id = request.session.get("user_id")
    if not user_id:
        return None
    return await repos.users.get_by_id(user_id)


async def require_auth(request: Request, repos: RepoDep) -> User:
    """Resolve the session user, rejecting missing, banned or superseded sessions."""
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")

    user = await repos.users.get_by_id(user_id)
    if user is None:
        clear_session(request)
        raise HTTPException(status_code=401, detail="Authentication required")

    if is_active(user.banned_until):
        clear_session(request)
        raise HTTPException(status_code=403, detail=ban_message(user))

    if settings.single_session_per_user and user.session_token:
        if request.session.get("session_token") != user.session_token:
            clear_session(request)
            raise HTTPException(status_code=401, detail="Session expired")

    return user


CurrentUser = Annotated[User, Depends(require_auth)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]


async def require_admin(user: CurrentUser) -> User:
    if user.role != constant.ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


async def require_moderator(user: CurrentUser) -> User:
    if user.role not in (constant.ROLE_ADMIN, constant.ROLE_MODERATOR):
        raise HTTPException(status_code=403, detail="Moderator access required")
    return user


AdminUser = Annotated[User, Depends(require_admin)]
ModeratorUser = Annotated[User, Depends(require_moderator)]
