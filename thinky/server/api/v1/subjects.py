"""
Subject Endpoints.

Subjects are private folders for a student's reviewers. Every route here
acts on the caller's own subjects only.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException

from thinky.core.database.entities.subjects import Subject
from thinky.core.logging_config import get_logger
from thinky.core.models.io import ReviewerRead, SchoolRead, SubjectRead, SubjectWrite
from thinky.server.services.deps import CurrentUser, RepoDep
from thinky.server.services.pagination import page_window

logger = get_logger(__name__)

router = APIRouter()


def _subject(subject: Subject) -> dict:
    return SubjectRead.model_validate(subject).model_dump(mode="json")


@router.get(
    "/subjects",
    summary="List Subjects",
    description="List the caller's subjects, newest first.",
)
async def list_subjects(user: CurrentUser, repos: RepoDep):
    subjects = await repos.subjects.list_for_user(user.id)
    return {"subjects": [_subject(s) for s in subjects]}


@router.get(
    "/schools",
    summary="List Verified Schools",
    description="Schools a subject can be filed under, by name.",
)
async def list_schools(user: CurrentUser, repos: RepoDep):
    """
    List verified schools.

    The list only feeds a picker in the UI, so a lookup failure yields an
    empty list instead of an error.
    """
    try:
        schools = await repos.schools.list_by_name()
    except Exception as e:
        logger.warning(f"Could not load verified schools: {e}")
        return {"schools": []}
    return {"schools": [SchoolRead.model_validate(s).model_dump() for s in schools]}


@router.post(
    "/subjects",
    summary="Create Subject",
    description="Create a subject for the caller.",
    responses={400: {"description": "Missing name, description or school"}},
)
async def create_subject(body: SubjectWrite, user: CurrentUser, repos: RepoDep):
    if not body.name:
        raise HTTPException(status_code=400, detail="Subject name is required")
    if not body.description:
        raise HTTPException(status_code=400, detail="Subject description is required")
    if not body.school:
        raise HTTPException(status_code=400, detail="School selection is required")

    subject = await repos.subjects.create(
        Subject(user_id=user.id, name=body.name, description=body.description, school=body.school)
    )
    return {"subject": _subject(subject)}


@router.put(
    "/subjects/{subject_id}",
    summary="Update Subject",
    description="Rename or re-describe one of the caller's subjects.",
    responses={400: {"description": "Missing name"}, 404: {"description": "Subject not found"}},
)
async def update_subject(subject_id: str, body: SubjectWrite, user: CurrentUser, repos: RepoDep):
    if not body.name:
        raise HTTPException(status_code=400, detail="Subject name is required")
    subject = await repos.subjects.get_owned(subject_id, user.id)
    if subject is None:
        raise HTTPException(status_code=404, detail="Subject not found")

    subject.name = body.name
    subject.description = body.description or ""
    if body.school:
        subject.school = body.school
    subject = await repos.subjects.update(subject)
    return {"subject": _subject(subject)}


@router.delete(
    "/subjects/{subject_id}",
    summary="Delete Subject",
    description="Delete one of the caller's subjects together with its reviewers.",
    responses={404: {"description": "Subject not found"}},
)
async def delete_subject(subject_id: str, user: CurrentUser, repos: RepoDep):
    if await repos.subjects.get_owned(subject_id, user.id) is None:
        raise HTTPException(status_code=404, detail="Subject not found")
    await repos.subjects.delete(subject_id)
    return {"message": "Subject deleted successfully"}


@router.get(
    "/subjects/{subject_id}/reviewers",
    summary="List Subject Reviewers",
    description="One page of the caller's reviewers in a subject, optionally filtered by a search term.",
)
async def list_subject_reviewers(
    subject_id: str,
    user: CurrentUser,
    repos: RepoDep,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    search: Optional[str] = None,
):
    """
    List reviewers of a subject.

    - **limit**: page size (default 10, at most 200)
    - **offset**: rows to skip
    - **search**: case-insensitive match on title or content
    """
    size, skip = page_window(limit, offset)
    reviewers, count = await repos.reviewers.list_for_subject(
        subject_id, user.id, search=search, limit=size, offset=skip
    )
    return {
        "reviewers": [ReviewerRead.model_validate(r).model_dump(mode="json") for r in reviewers],
        "count": count,
        "limit": size,
        "offset": skip,
    }
