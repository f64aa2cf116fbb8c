"""
Response shaping for rows that embed related records.

Reviewers are returned with their author (``users``) and subject
(``subjects``); chat messages with their sender (``users``); moderation
reports with their content and people. Related rows are loaded in one query
per table.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from thinky.core.database.entities.messages import Message
from thinky.core.database.entities.reports import Report
from thinky.core.database.entities.reviewers import Reviewer
from thinky.core.database.repositories import SqlRepoBundle
from thinky.core.models.io import (
    AuthorSummary,
    MessageRead,
    ModerationItem,
    ModerationUser,
    ReportedReviewer,
    ReviewerDetail,
    SenderSummary,
    SubjectSummary,
)


async def reviewer_details(repos: SqlRepoBundle, reviewers: Sequence[Reviewer]) -> List[Dict[str, Any]]:
    authors = await repos.users.get_many([r.user_id for r in reviewers])
    subjects = await repos.subjects.get_many([r.subject_id for r in reviewers])
    details = []
    for reviewer in reviewers:
        detail = ReviewerDetail.model_validate(reviewer)
        author = authors.get(reviewer.user_id)
        subject = subjects.get(reviewer.subject_id)
        detail.users = AuthorSummary.model_validate(author) if author else None
        detail.subjects = SubjectSummary.model_validate(subject) if subject else None
        details.append(detail.model_dump(mode="json"))
    return details


async def reviewer_detail(repos: SqlRepoBundle, reviewer: Reviewer) -> Dict[str, Any]:
    return (await reviewer_details(repos, [reviewer]))[0]


async def messages_with_senders(repos: SqlRepoBundle, messages: Sequence[Message]) -> List[Dict[str, Any]]:
    senders = await repos.users.get_many([m.user_id for m in messages])
    rows = []
    for message in messages:
        row = MessageRead.model_validate(message)
        sender = senders.get(message.user_id)
        row.users = SenderSummary.model_validate(sender) if sender else None
        rows.append(row.model_dump(mode="json"))
    return rows


async def moderation_items(repos: SqlRepoBundle, reports: Sequence[Report]) -> List[Dict[str, Any]]:
    """Open reports with the reviewer or message they concern and the people involved."""
    reviewers = await repos.reviewers.get_many([r.reviewer_id for r in reports if r.reviewer_id])
    messages = await repos.messages.get_many([r.message_id for r in reports if r.message_id])
    user_ids = [r.reporter_id for r in reports if r.reporter_id]
    user_ids += [r.action_taken_by for r in reports if r.action_taken_by]
    user_ids += [rv.user_id for rv in reviewers.values()]
    user_ids += [m.user_id for m in messages.values()]
    users = await repos.users.get_many(user_ids)

    def person(user_id: Optional[str]) -> Optional[ModerationUser]:
        user = users.get(user_id) if user_id else None
        return ModerationUser.model_validate(user) if user else None

    items = []
    for report in reports:
        item = ModerationItem.model_validate(report)
        reviewer = reviewers.get(report.reviewer_id) if report.reviewer_id else None
        if reviewer is not None:
            item.reviewers = ReportedReviewer.model_validate(reviewer)
            item.reviewers.users = person(reviewer.user_id)
        message = messages.get(report.message_id) if report.message_id else None
        if message is not None:
            item.message = MessageRead.model_validate(message)
            sender = users.get(message.user_id)
            item.message.users = SenderSummary.model_validate(sender) if sender else None
        item.reporter = person(report.reporter_id)
        item.action_user = person(report.action_taken_by)
        item.reported_at = report.created_at
        items.append(item.model_dump(mode="json"))
    return items
