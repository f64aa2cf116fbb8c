"""
Reviewer, reaction and report I/O models.

Flashcards arrive in more than one shape (``front``/``back`` or
``meaning``/``content``), so the write model keeps them as plain dicts and
the reviewer service normalises them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..base import BaseSchema, UtcDateTime


class ReviewerWrite(BaseModel):
    """Body for creating or updating a reviewer."""

    subject_id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    is_public: Optional[bool] = None
    flashcards: Optional[List[Dict[str, Any]]] = None
    flashcards_text: Optional[str] = None


class Flashcard(BaseModel):
    id: str
    front: str
    back: str
    is_public: bool = True
    uploader_id: Optional[str] = None


class AuthorSummary(BaseSchema):
    username: str
    email: Optional[str] = None
    profile_picture_url: Optional[str] = None


class SubjectSummary(BaseSchema):
    name: str
    school: Optional[str] = None


class ReviewerRead(BaseSchema):
    id: str
    user_id: str
    subject_id: str
    title: str
    content: str
    is_public: bool = True
    flashcards: List[Flashcard] = Field(default_factory=list)
    hidden_until: Optional[UtcDateTime] = None
    created_at: UtcDateTime
    updated_at: Optional[UtcDateTime] = None

    @field_validator("flashcards", mode="before")
    @classmethod
    def _no_flashcards(cls, value):
        return value or []


class ReviewerDetail(ReviewerRead):
    """A reviewer together with its author and subject."""

    users: Optional[AuthorSummary] = None
    subjects: Optional[SubjectSummary] = None


class ReactionRequest(BaseModel):
    reaction_type: Optional[str] = None
    reaction: Optional[str] = Field(default=None, description="Older clients send the type under this key")


class ReactionState(BaseModel):
    count: int
    reacted: bool


class ReportRequest(BaseModel):
    """Body of a report against a reviewer or a chat message."""

    report_type: Optional[str] = None
    details: Optional[str] = None


class ReportRead(BaseSchema):
    id: str
    type: str
    reviewer_id: Optional[str] = None
    message_id: Optional[str] = None
    reported_user_id: Optional[str] = None
    reporter_id: Optional[str] = None
    report_type: str
    details: Optional[str] = None
    status: Optional[str] = None
    action_taken_by: Optional[str] = None
    action_taken: Optional[str] = None
    action_taken_at: Optional[UtcDateTime] = None
    resolved_at: Optional[UtcDateTime] = None
    created_at: UtcDateTime
