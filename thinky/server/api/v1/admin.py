"""
Administration Endpoints.

Site-wide statistics, account management and removal of any reviewer or
chat message. Every route requires the admin role.
"""

from datetime import timedelta

from fastapi import APIRouter, HTTPException

from thinky.core.database import utc_now
from thinky.core.logging_config import get_logger
from thinky.core.models.io import AdminUserRead, Analytics, RoleUpdate, UserSummary
from thinky.server.core import constant
from thinky.server.services.deps import AdminUser, RepoDep
from thinky.server.services.presenters import reviewer_details

logger = get_logger(__name__)

router = APIRouter(prefix="/admin")


@router.get(
    "/analytics",
    summary="Site Analytics",
    description="Totals for users by role, content, open reports and users online in the last few minutes.",
)
async def analytics(admin: AdminUser, repos: RepoDep):
    roles = await repos.users.count_by_role()
    online_since = utc_now() - timedelta(minutes=constant.ONLINE_WINDOW_MINUTES)
    result = Analytics(
        total_users=await repos.users.count(),
        total_students=roles.get(constant.ROLE_STUDENT, 0),
        total_admins=roles.get(constant.ROLE_ADMIN, 0),
        total_moderators=roles.get(constant.ROLE_MODERATOR, 0),
        total_subjects=await repos.subjects.count(),
        total_reviewers=await repos.reviewers.count(),
        total_messages=await repos.messages.count(),
        open_reports=await repos.reports.count_open(),
        current_online_users=await repos.online_users.count_since(online_since),
    )
    return {"analytics": result.model_dump()}


@router.get(
    "/users",
    summary="List Users",
    description="All accounts, newest first, with their moderation state.",
)
async def list_users(admin: AdminUser, repos: RepoDep):
    users = await repos.users.list()
    return {"users": [AdminUserRead.model_validate(u).model_dump(mode="json") for u in users]}


@router.put(
    "/users/{user_id}/role",
    summary="Change Role",
    description="Set a user's role to admin, moderator or student.",
    responses={400: {"description": "Invalid role"}, 404: {"description": "User not found"}},
)
async def update_role(user_id: str, body: RoleUpdate, admin: AdminUser, repos: RepoDep):
    if body.role not in constant.ASSIGNABLE_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")
    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    user.role = body.role
    user = await repos.users.update(user)
    logger.info(f"Admin {admin.id} set role of {user.id} to {user.role}")
    return {"user": UserSummary.model_validate(user).model_dump()}


@router.delete(
    "/users/{user_id}",
    summary="Delete User",
    description="Delete an account and everything it owns.",
    responses={400: {"description": "Admins cannot delete themselves"}, 404: {"description": "User not found"}},
)
async def delete_user(user_id: str, admin: AdminUser, repos: RepoDep):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    if not await repos.users.delete(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(f"Admin {admin.id} deleted user {user_id}")
    return {"message": "User deleted successfully"}


@router.get(
    "/reviewers",
    summary="List All Reviewers",
    description="Every reviewer, public or not, with author and subject.",
)
async def list_reviewers(admin: AdminUser, repos: RepoDep):
    reviewers = await repos.reviewers.list()
    return {"reviewers": await reviewer_details(repos, reviewers)}


@router.delete(
    "/reviewers/{reviewer_id}",
    summary="Delete Any Reviewer",
    responses={404: {"description": "Reviewer not found"}},
)
async def delete_reviewer(reviewer_id: str, admin: AdminUser, repos: RepoDep):
    if not await repos.reviewers.delete(reviewer_id):
        raise HTTPException(status_code=404, detail="Reviewer not found")
    return {"message": "Reviewer deleted successfully"}


@router.delete(
    "/messages/{message_id}",
    summary="Delete Any Message",
    responses={404: {"description": "Message not found"}},
)
async def delete_message(message_id: str, admin: AdminUser, repos: RepoDep):
    if not await repos.messages.delete(message_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return {"message": "Message deleted successfully"}
