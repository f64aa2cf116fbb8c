"""
Public Profile Endpoints.

Guest-friendly views of another user's profile and public reviewers.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException

from thinky.core.models.io import PublicProfile
from thinky.server.services.deps import RepoDep
from thinky.server.services.pagination import page_window
from thinky.server.services.presenters import reviewer_details

router = APIRouter()


@router.get(
    "/users/{user_id}",
    summary="Get Public Profile",
    description="The public part of a user's profile.",
    responses={404: {"description": "User not found"}},
)
async def get_public_profile(user_id: str, repos: RepoDep):
    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": PublicProfile.model_validate(user).model_dump(mode="json")}


@router.get(
    "/users/{user_id}/reviewers",
    summary="List User's Public Reviewers",
    description="Paginated public reviewers written by one user, newest first.",
)
async def list_user_reviewers(
    user_id: str,
    repos: RepoDep,
    search: Optional[str] = None,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
):
    size, skip = page_window(limit, offset)
    search = (search or "").strip() or None
    reviewers, count = await repos.reviewers.list_public(search=search, author_id=user_id, limit=size, offset=skip)
    return {"reviewers": await reviewer_details(repos, reviewers), "count": count, "limit": size, "offset": skip}
