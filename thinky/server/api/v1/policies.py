"""
Community Policy Endpoints.

Anyone can read the guidelines; only admins maintain them.
"""

from fastapi import APIRouter, HTTPException

from thinky.core.database import utc_now
from thinky.core.database.entities.policies import Policy
from thinky.core.models.io import PolicyRead, PolicyWrite
from thinky.server.services.deps import AdminUser, RepoDep

router = APIRouter()

POLICY_CATEGORIES = ("reviewer", "message", "both")


def _policy(policy: Policy) -> dict:
    return PolicyRead.model_validate(policy).model_dump(mode="json")


def _check_category(category: str) -> None:
    if category not in POLICY_CATEGORIES:
        raise HTTPException(status_code=400, detail="Category must be reviewer, message or both")


@router.get(
    "/policies",
    summary="List Policies",
    description="Community guidelines ordered by category and title.",
)
async def list_policies(repos: RepoDep):
    return {"policies": [_policy(p) for p in await repos.policies.list_ordered()]}


@router.get(
    "/admin/policies",
    summary="List Policies (Admin)",
    description="Community guidelines for the admin editor.",
)
async def admin_list_policies(admin: AdminUser, repos: RepoDep):
    return {"policies": [_policy(p) for p in await repos.policies.list_ordered()]}


@router.post(
    "/admin/policies",
    summary="Create Policy",
    description="Add a community guideline.",
    responses={400: {"description": "Missing title or unknown category"}},
)
async def create_policy(body: PolicyWrite, admin: AdminUser, repos: RepoDep):
    title = (body.title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    category = body.category or "both"
    _check_category(category)
    policy = await repos.policies.create(
        Policy(title=title, description=(body.description or "").strip(), category=category)
    )
    return {"policy": _policy(policy)}


@router.put(
    "/admin/policies/{policy_id}",
    summary="Update Policy",
    description="Edit a community guideline.",
    responses={400: {"description": "Empty title or unknown category"}, 404: {"description": "Policy not found"}},
)
async def update_policy(policy_id: str, body: PolicyWrite, admin: AdminUser, repos: RepoDep):
    policy = await repos.policies.get_by_id(policy_id)
    if policy is None:
        raise HTTPException(status_code=404, detail="Policy not found")
    if body.title is not None:
        title = body.title.strip()
        if not title:
            raise HTTPException(status_code=400, detail="Title is required")
        policy.title = title
    if body.description is not None:
        policy.description = body.description.strip()
    if body.category is not None:
        _check_category(body.category)
        policy.category = body.category
    policy.updated_at = utc_now()
    policy = await repos.policies.update(policy)
    return {"policy": _policy(policy)}


@router.delete(
    "/admin/policies/{policy_id}",
    summary="Delete Policy",
    description="Remove a community guideline.",
    responses={404: {"description": "Policy not found"}},
)
async def delete_policy(policy_id: str, admin: AdminUser, repos: RepoDep):
    if not await repos.policies.delete(policy_id):
        raise HTTPException(status_code=404, detail="Policy not found")
    return {"message": "Policy deleted successfully"}
