"""
Presence Endpoints.

Clients poll a heartbeat; whoever sent one recently counts as online.
"""

from fastapi import APIRouter

from thinky.core.models.io import OnlineUserRead
from thinky.server.services.deps import CurrentUser, RepoDep

router = APIRouter()


@router.get(
    "/online-users",
    summary="List Online Users",
    description="Everyone with a heartbeat except the caller, most recent first.",
)
async def list_online_users(user: CurrentUser, repos: RepoDep):
    rows = await repos.online_users.list_except(user.id)
    return {"onlineUsers": [OnlineUserRead.model_validate(r).model_dump(mode="json") for r in rows]}


@router.post(
    "/online-status",
    summary="Heartbeat",
    description="Mark the caller as online now.",
)
async def update_online_status(user: CurrentUser, repos: RepoDep):
    await repos.online_users.touch(user.id, user.username)
    return {"message": "Status updated"}
