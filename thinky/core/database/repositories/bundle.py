"""
Repository bundle.

Groups every repository around one ``AsyncSession`` so a request handler gets
all of its data access through a single dependency.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .auth_tokens import EmailVerificationRepository, PasswordResetRepository
from .messages import MessageRepository
from .online_users import OnlineUserRepository
from .policies import PolicyRepository
from .reactions import ReactionRepository
from .reports import ReportRepository
from .reviewers import ReviewerRepository
from .schools import SchoolRepository
from .subjects import SubjectRepository
from .users import UserRepository


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of all SQL repositories for dependency injection."""

    session: AsyncSession
    users: UserRepository
    schools: SchoolRepository
    subjects: SubjectRepository
    reviewers: ReviewerRepository
    reactions: ReactionRepository
    messages: MessageRepository
    reports: ReportRepository
    policies: PolicyRepository
    verifications: EmailVerificationRepository
    password_resets: PasswordResetRepository
    online_users: OnlineUserRepository


def build_sql_repos(*, session: AsyncSession) -> SqlRepoBundle:
    """Build a ``SqlRepoBundle`` sharing ``session``."""
    return SqlRepoBundle(
        session=session,
        users=UserRepository(session),
        schools=SchoolRepository(session),
        subjects=SubjectRepository(session),
        reviewers=ReviewerRepository(session),
        reactions=ReactionRepository(session),
        messages=MessageRepository(session),
        reports=ReportRepository(session),
        policies=PolicyRepository(session),
        verifications=EmailVerificationRepository(session),
        password_resets=PasswordResetRepository(session),
        online_users=OnlineUserRepository(session),
    )
