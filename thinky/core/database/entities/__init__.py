"""
Database entity models.

This package contains all database entity models organized by business domain
and table relationships.

Modules:
- users: Accounts and their moderation state
- schools: Verified schools offered for subjects
- subjects: Per-user course subjects
- reviewers: Study documents with inline flashcards
- reactions: Reactions to reviewers
- messages: Chat messages
- reports: Moderation reports
- policies: Community guidelines
- auth_tokens: E-mail verification and password reset tokens
- online_users: Chat presence heartbeats
"""

from . import (
    auth_tokens,
    messages,
    online_users,
    policies,
    reactions,
    reports,
    reviewers,
    schools,
    subjects,
    users,
)
from .auth_tokens import EmailVerification, PasswordReset
from .messages import Message
from .online_users import OnlineUser
from .policies import Policy
from .reactions import Reaction
from .reports import Report
from .reviewers import Reviewer
from .schools import VerifiedSchool
from .subjects import Subject
from .users import User

__all__ = [
    "EmailVerification",
    "Message",
    "OnlineUser",
    "PasswordReset",
    "Policy",
    "Reaction",
    "Report",
    "Reviewer",
    "Subject",
    "User",
    "VerifiedSchool",
    "auth_tokens",
    "messages",
    "online_users",
    "policies",
    "reactions",
    "reports",
    "reviewers",
    "schools",
    "subjects",
    "users",
]
