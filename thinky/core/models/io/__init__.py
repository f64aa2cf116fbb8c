"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and the browser front end. These models are separate
from database entities to allow independent evolution of API contracts.

Modules:
- auth: Registration, login and profile models
- subjects: Subject and school models
- reviewers: Reviewer, flashcard, reaction and report models
- messages: Chat and presence models
- moderation: Moderation queue and action models
- policies: Community guideline models
- admin: User administration and analytics models
"""

from .admin import AdminUserRead, Analytics, RoleUpdate
from .auth import (
    EmailRequest,
    LoginRequest,
    PasswordResetRequest,
    ProfileUpdate,
    PublicProfile,
    RegisterRequest,
    UserProfile,
    UserSummary,
)
from .messages import MessageCreate, MessageRead, OnlineUserRead, SenderSummary, UnreadCounts
from .moderation import ModerationActionRequest, ModerationItem, ModerationUser, ReportedReviewer
from .policies import PolicyRead, PolicyWrite
from .reviewers import (
    AuthorSummary,
    Flashcard,
    ReactionRequest,
    ReactionState,
    ReportRead,
    ReportRequest,
    ReviewerDetail,
    ReviewerRead,
    ReviewerWrite,
    SubjectSummary,
)
from .subjects import SchoolRead, SubjectRead, SubjectWrite

__all__ = [
    "AdminUserRead",
    "Analytics",
    "AuthorSummary",
    "EmailRequest",
    "Flashcard",
    "LoginRequest",
    "MessageCreate",
    "MessageRead",
    "ModerationActionRequest",
    "ModerationItem",
    "ModerationUser",
    "OnlineUserRead",
    "PasswordResetRequest",
    "PolicyRead",
    "PolicyWrite",
    "ProfileUpdate",
    "PublicProfile",
    "ReactionRequest",
    "ReactionState",
    "RegisterRequest",
    "ReportRead",
    "ReportRequest",
    "ReviewerDetail",
    "ReviewerRead",
    "ReviewerWrite",
    "RoleUpdate",
    "SchoolRead",
    "SubjectRead",
    "SubjectWrite",
    "SenderSummary",
    "UnreadCounts",
]
