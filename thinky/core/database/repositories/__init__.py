"""
Database repository layer using SQLModel.

This package contains all repository classes organized by business domain
and table relationships. Each module provides async data access operations
for its corresponding SQLModel entity models.

Modules:
- base: Repository interfaces, the shared CRUD implementation and QueryBuilder
- users: Accounts, lookups for authentication and cascading deletion
- schools: Verified school list
- subjects: Per-user subjects
- reviewers: Owner and public reviewer listings
- reactions: Reaction toggling and counts
- messages: Chat rooms, conversations and unread counts
- reports: Moderation queue
- policies: Community guidelines
- auth_tokens: E-mail verification and password reset tokens
- online_users: Chat presence
- bundle: All repositories around one session
"""

from . import (
    auth_tokens,
    base,
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
from .bundle import SqlRepoBundle, build_sql_repos

__all__ = [
    "SqlRepoBundle",
    "auth_tokens",
    "base",
    "build_sql_repos",
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
