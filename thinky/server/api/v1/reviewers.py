"""
Reviewer Endpoints.

Reviewers are study documents with optional flashcards. Authors manage
their own; everyone else sees the public ones that moderators have not
hidden. Reactions and reports hang off individual reviewers.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException

from thinky.core.database import utc_now
from thinky.core.database.entities.reports import Report
from thinky.core.database.entities.reviewers import Reviewer
from thinky.core.logging_config import get_logger
from thinky.core.models import to_iso
from thinky.core.models.io import ReactionRequest, ReportRead, ReportRequest, ReviewerRead, ReviewerWrite
from thinky.server.core import constant
from thinky.server.services.deps import CurrentUser, OptionalUser, RepoDep
from thinky.server.services.flashcards import normalize_flashcards, parse_flashcards_text
from thinky.server.services.pagination import page_window
from thinky.server.services.presenters import reviewer_detail, reviewer_details
from thinky.server.services.security import is_active

logger = get_logger(__name__)

router = APIRouter()


def _reviewer(reviewer: Reviewer) -> dict:
    return ReviewerRead.model_validate(reviewer).model_dump(mode="json")


@router.get(
    "/reviewers/public",
    summary="List Public Reviewers",
    description="All public, visible reviewers with author and subject, newest first.",
)
async def list_public_reviewers(
    user: CurrentUser,
    repos: RepoDep,
    search: Optional[str] = None,
    student: Optional[str] = None,
):
    reviewers, _ = await repos.reviewers.list_public(search=search, author_id=student)
    return {"reviewers": await reviewer_details(repos, reviewers)}


@router.get(
    "/reviewers/public-guest",
    summary="List Public Reviewers (Guest)",
    description="Paginated public reviewers for visitors who are not logged in.",
)
async def list_public_reviewers_guest(
    repos: RepoDep,
    search: Optional[str] = None,
    student: Optional[str] = None,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
):
    size, skip = page_window(limit, offset)
    reviewers, count = await repos.reviewers.list_public(search=search, author_id=student, limit=size, offset=skip)
    return {"reviewers": await reviewer_details(repos, reviewers), "count": count, "limit": size, "offset": skip}


@router.post(
    "/reviewers",
    summary="Create Reviewer",
    description="Create a reviewer in one of the caller's subjects.",
    responses={
        400: {"description": "Missing subject, title or content"},
        403: {"description": "Caller is banned or restricted from creating content"},
        404: {"description": "Subject not found"},
    },
)
async def create_reviewer(body: ReviewerWrite, user: CurrentUser, repos: RepoDep):
    """
    Create a reviewer.

    Flashcards come either as a ``flashcards`` list or as ``flashcards_text``
    with one ``front,back`` pair per line. Reviewers are public unless
    ``is_public`` is explicitly false.
    """
    now = utc_now()
    if is_active(user.banned_until, now):
        raise HTTPException(
            status_code=403,
            detail={
                "error": "Your account is banned and cannot create content.",
                "banned_until": to_iso(user.banned_until),
                "status": "banned",
            },
        )
    if is_active(user.blocked_from_creating_until, now):
        raise HTTPException(
            status_code=403,
            detail={
                "error": "You are restricted from creating reviewers at this time.",
                "blocked_from_creating_until": to_iso(user.blocked_from_creating_until),
                "status": "restricted",
            },
        )

    if not body.subject_id or not body.title or not body.content:
        raise HTTPException(status_code=400, detail="Subject, title, and content are required")
    if await repos.subjects.get_owned(body.subject_id, user.id) is None:
        raise HTTPException(status_code=404, detail="Subject not found")

    flashcards = None
    if body.flashcards:
        flashcards = normalize_flashcards(body.flashcards, user.id)
    elif body.flashcards_text:
        flashcards = parse_flashcards_text(body.flashcards_text, user.id) or None

    reviewer = await repos.reviewers.create(
        Reviewer(
            user_id=user.id,
            subject_id=body.subject_id,
            title=body.title,
            content=body.content,
            is_public=body.is_public is not False,
            flashcards=flashcards,
        )
    )
    logger.info(f"User {user.id} created reviewer {reviewer.id}")
    return {"reviewer": _reviewer(reviewer)}


@router.get(
    "/reviewers/{reviewer_id}",
    summary="Get Reviewer",
    description="One reviewer with its author and subject.",
    responses={404: {"description": "Reviewer not found"}},
)
async def get_reviewer(reviewer_id: str, user: CurrentUser, repos: RepoDep):
    reviewer = await repos.reviewers.get_by_id(reviewer_id)
    if reviewer is None:
        raise HTTPException(status_code=404, detail="Reviewer not found")
    privileged = user.id == reviewer.user_id or user.role in (constant.ROLE_ADMIN, constant.ROLE_MODERATOR)
    if not privileged and (not reviewer.is_public or reviewer.is_hidden(utc_now())):
        raise HTTPException(status_code=404, detail="Reviewer not found")
    return {"reviewer": await reviewer_detail(repos, reviewer)}


@router.put(
    "/reviewers/{reviewer_id}",
    summary="Update Reviewer",
    description="Edit one of the caller's reviewers.",
    responses={404: {"description": "Reviewer not found"}},
)
async def update_reviewer(reviewer_id: str, body: ReviewerWrite, user: CurrentUser, repos: RepoDep):
    reviewer = await repos.reviewers.get_owned(reviewer_id, user.id)
    if reviewer is None:
        raise HTTPException(status_code=404, detail="Reviewer not found")

    if body.title:
        reviewer.title = body.title
    if body.content is not None:
        reviewer.content = body.content
    if body.is_public is not None:
        reviewer.is_public = body.is_public
    if body.subject_id and body.subject_id != reviewer.subject_id:
        if await repos.subjects.get_owned(body.subject_id, user.id) is None:
            raise HTTPException(status_code=404, detail="Subject not found")
        reviewer.subject_id = body.subject_id

    if body.flashcards is not None:
        reviewer.flashcards = normalize_flashcards(body.flashcards, user.id)
    elif body.flashcards_text:
        parsed = parse_flashcards_text(body.flashcards_text, user.id)
        if parsed:
            reviewer.flashcards = parsed

    reviewer.updated_at = utc_now()
    reviewer = await repos.reviewers.update(reviewer)
    return {"reviewer": _reviewer(reviewer)}


@router.delete(
    "/reviewers/{reviewer_id}",
    summary="Delete Reviewer",
    description="Delete one of the caller's reviewers.",
    responses={404: {"description": "Reviewer not found"}},
)
async def delete_reviewer(reviewer_id: str, user: CurrentUser, repos: RepoDep):
    if await repos.reviewers.get_owned(reviewer_id, user.id) is None:
        raise HTTPException(status_code=404, detail="Reviewer not found")
    await repos.reviewers.delete(reviewer_id)
    return {"message": "Reviewer deleted successfully"}


@router.get(
    "/reviewers/{reviewer_id}/reactions",
    summary="Get Reactions",
    description="Reaction count of a reviewer and whether the caller gave a heart.",
)
async def get_reactions(reviewer_id: str, repos: RepoDep, user: OptionalUser):
    reactions = await repos.reactions.list_for_reviewer(reviewer_id)
    reacted = user is not None and any(
        r.user_id == user.id and r.reaction_type == constant.DEFAULT_REACTION for r in reactions
    )
    return {"count": len(reactions), "reacted": reacted}


@router.post(
    "/reviewers/{reviewer_id}/reactions",
    summary="Toggle Reaction",
    description="Add the caller's reaction, or remove it when already present.",
    responses={400: {"description": "Unknown reviewer"}, 403: {"description": "Authors cannot react to their own reviewer"}},
)
async def toggle_reaction(reviewer_id: str, user: CurrentUser, repos: RepoDep, body: Optional[ReactionRequest] = None):
    reaction_type = (body and (body.reaction_type or body.reaction)) or constant.DEFAULT_REACTION
    reviewer = await repos.reviewers.get_by_id(reviewer_id)
    if reviewer is None:
        raise HTTPException(status_code=400, detail="Invalid reviewer")

    if reviewer.user_id == user.id:
        current = await repos.reactions.list_for_reviewer(reviewer_id, reaction_type)
        raise HTTPException(
            status_code=403,
            detail={"error": "Cannot react to your own reviewer", "count": len(current), "reacted": False},
        )

    reacted = await repos.reactions.toggle(reviewer_id, user.id, reaction_type)
    current = await repos.reactions.list_for_reviewer(reviewer_id, reaction_type)
    return {"count": len(current), "reacted": reacted}


@router.post(
    "/reviewers/{reviewer_id}/report",
    summary="Report Reviewer",
    description="Flag a reviewer for moderation.",
    responses={400: {"description": "Missing report type"}, 404: {"description": "Reviewer not found"}},
)
async def report_reviewer(reviewer_id: str, body: ReportRequest, user: CurrentUser, repos: RepoDep):
    if not body.report_type:
        raise HTTPException(status_code=400, detail="report_type is required")
    reviewer = await repos.reviewers.get_by_id(reviewer_id)
    if reviewer is None:
        raise HTTPException(status_code=404, detail="Reviewer not found")

    report = await repos.reports.create(
        Report(
            type="reviewer",
            reviewer_id=reviewer.id,
            reported_user_id=reviewer.user_id,
            reporter_id=user.id,
            report_type=body.report_type,
            details=body.details,
        )
    )
    logger.info(f"User {user.id} reported reviewer {reviewer.id} ({body.report_type})")
    return {"ok": True, "report": ReportRead.model_validate(report).model_dump(mode="json")}
