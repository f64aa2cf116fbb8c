"""
Moderation workflow.

Maps a report, the action a moderator picked and an optional deadline onto
changes to the reported user, reviewer or chat message, then closes the
report. Notification e-mails are sent afterwards by
``notify_moderation_outcome`` so the API can run them in the background.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from thinky.core.database import as_utc, utc_now
from thinky.core.database.entities.messages import Message
from thinky.core.database.entities.reports import Report
from thinky.core.database.entities.reviewers import Reviewer
from thinky.core.database.repositories import SqlRepoBundle
from thinky.core.logging_config import get_logger
from thinky.core.monitoring import log_moderation_action
from thinky.server.core import constant

from .mailer import EmailService
from .security import is_permanent

logger = get_logger(__name__)

BAN = "ban"
RESTRICT = "restrict"
SUSPEND_AUTHOR = "suspend_author"
DELETE_USER = "delete_user"
WARN_REVIEWER = "warn_reviewer"
WARN_MESSAGE = "warn_message"
DELETE_CONTENT = "delete_content"
HIDE_CONTENT = "hide_content"
DELETE_MESSAGE = "delete_message"
MUTE = "mute"
BAN_CHAT = "ban_chat"
DISMISS = "dismiss"

ACTIONS = frozenset(
    {
        BAN,
        RESTRICT,
        SUSPEND_AUTHOR,
        DELETE_USER,
        WARN_REVIEWER,
        WARN_MESSAGE,
        DELETE_CONTENT,
        HIDE_CONTENT,
        DELETE_MESSAGE,
        MUTE,
        BAN_CHAT,
        DISMISS,
    }
)
# Actions that take an ``until`` deadline
TIMED_ACTIONS = frozenset({BAN, RESTRICT, SUSPEND_AUTHOR, HIDE_CONTENT, MUTE, BAN_CHAT})
# Actions that change the reported user's account
USER_ACTIONS = frozenset({BAN, RESTRICT, SUSPEND_AUTHOR, DELETE_USER, WARN_REVIEWER, WARN_MESSAGE, MUTE, BAN_CHAT})
REVIEWER_ACTIONS = frozenset({DELETE_CONTENT, HIDE_CONTENT})

_DURATION = re.compile(r"^(\d+)\s*([hdwm])$")


class ModerationError(Exception):
    """A moderation request that cannot be carried out."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _add_years(value: datetime, years: int) -> datetime:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # 29 February in a non-leap target year
        return value.replace(year=value.year + years, day=28)


def _add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def permanent_until(now: Optional[datetime] = None) -> datetime:
    return _add_years(as_utc(now) if now is not None else utc_now(), constant.PERMANENT_YEARS)


def parse_until(value: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Turn a moderator's ``until`` input into an aware UTC deadline.

    Accepts ``permanent``, durations (``12h``, ``3d``, ``2w``, ``45m`` for
    minutes when 30 <= N < 100, otherwise ``Nm`` means months) and ISO
    timestamps. Blank or unreadable input means permanent.
    """
    now = as_utc(now) if now is not None else utc_now()
    text = (value or "").strip()
    if not text or text.lower() == "permanent":
        return permanent_until(now)

    match = _DURATION.match(text.lower())
    if match:
        amount, unit = int(match.group(1)), match.group(2)
        if unit == "h":
            return now + timedelta(hours=amount)
        if unit == "d":
            return now + timedelta(days=amount)
        if unit == "w":
            return now + timedelta(weeks=amount)
        if 30 <= amount < 100:
            return now + timedelta(minutes=amount)
        return _add_months(now, amount)

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError:
        logger.warning(f"Invalid until value for moderation action, treating as permanent: {text!r}")
        return permanent_until(now)
    return as_utc(parsed)


def format_until(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC")


def decision_text(action: str, until: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human-readable outcome used in notification e-mails."""
    now = now or utc_now()
    when = format_until(until) if until is not None else ""
    if action == DISMISS:
        return "Dismissed"
    if action == DELETE_USER:
        return "User account deleted"
    if action == BAN:
        if until is None:
            return "Banned"
        return "Permanently banned" if is_permanent(until, now) else f"Banned until {when}"
    if action in (RESTRICT, SUSPEND_AUTHOR):
        return f"Restricted from posting until {when}" if until is not None else "Restricted from posting"
    if action in (WARN_REVIEWER, WARN_MESSAGE):
        return "Warning issued"
    if action in (DELETE_CONTENT, DELETE_MESSAGE):
        return "Content removed"
    if action == HIDE_CONTENT:
        return f"Content hidden until {when}"
    if action == MUTE:
        return f"Muted until {when}"
    if action == BAN_CHAT:
        return f"Banned from chat until {when}"
    return "No action taken"


@dataclass
class Recipient:
    email: str
    username: str


@dataclass
class ModerationOutcome:
    """What happened to a report, with everything the e-mails need."""

    report: Report
    action: str
    decision: str
    until: Optional[datetime]
    note: str
    reviewer_title: str
    reported: Optional[Recipient]
    reporter: Optional[Recipient]


class ModerationService:
    """Applies moderator decisions through the repositories."""

    def __init__(self, repos: SqlRepoBundle) -> None:
        self.repos = repos

    async def _recipient(self, user_id: Optional[str]) -> Optional[Recipient]:
        user = await self.repos.users.get_by_id(user_id) if user_id else None
        if user is None or not user.email:
            return None
        return Recipient(email=user.email, username=user.username or "")

    async def take_action(
        self,
        report_id: str,
        moderator_id: str,
        action: Optional[str],
        until: Optional[str] = None,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ModerationOutcome:
        """Apply ``action`` for report ``report_id``.

        Raises:
            ModerationError: Unknown report or action, or the content the
                action needs no longer exists
        """
        now = as_utc(now) if now is not None else utc_now()
        report = await self.repos.reports.get_by_id(report_id)
        if report is None:
            raise ModerationError(404, "Report not found")
        if action not in ACTIONS:
            raise ModerationError(400, "Invalid action")

        reviewer: Optional[Reviewer] = (
            await self.repos.reviewers.get_by_id(report.reviewer_id) if report.reviewer_id else None
        )
        message: Optional[Message] = (
            await self.repos.messages.get_by_id(report.message_id) if report.message_id else None
        )
        if action in REVIEWER_ACTIONS and reviewer is None:
            raise ModerationError(404, "Reviewer not found")
        if action == DELETE_MESSAGE and message is None:
            raise ModerationError(404, "Message not found")

        if reviewer is not None:
            target_user_id = reviewer.user_id
        elif message is not None:
            target_user_id = message.user_id
        else:
            target_user_id = report.reported_user_id
        target = await self.repos.users.get_by_id(target_user_id) if target_user_id else None
        if action in USER_ACTIONS and target is None:
            raise ModerationError(404, "Reported user not found")

        # Read before anything is deleted
        reported = await self._recipient(target_user_id)
        reporter = await self._recipient(report.reporter_id)
        reviewer_title = reviewer.title if reviewer is not None else ""

        deadline = parse_until(until, now) if action in TIMED_ACTIONS else None

        if action == BAN:
            target.banned_until = deadline
            await self.repos.users.update(target)
        elif action in (RESTRICT, SUSPEND_AUTHOR):
            target.blocked_from_creating_until = deadline
            await self.repos.users.update(target)
        elif action == DELETE_USER:
            await self.repos.users.delete(target.id)
        elif action in (WARN_REVIEWER, WARN_MESSAGE):
            target.warning_count = (target.warning_count or 0) + 1
            await self.repos.users.update(target)
        elif action == DELETE_CONTENT:
            await self.repos.reviewers.delete(reviewer.id)
        elif action == HIDE_CONTENT:
            reviewer.hidden_until = deadline
            await self.repos.reviewers.update(reviewer)
        elif action == DELETE_MESSAGE:
            await self.repos.messages.delete(message.id)
        elif action == MUTE:
            target.muted_until = deadline
            await self.repos.users.update(target)
        elif action == BAN_CHAT:
            target.chat_banned_until = deadline
            await self.repos.users.update(target)

        note = (note or "").strip()
        report.status = "dismissed" if action == DISMISS else "resolved"
        report.action_taken_by = moderator_id
        report.action_taken = f"{action} - {note}" if note else action
        report.action_taken_at = now
        report.resolved_at = now
        report = await self.repos.reports.update(report)

        log_moderation_action(report.id, action, moderator_id, target_user_id)
        return ModerationOutcome(
            report=report,
            action=action,
            decision=decision_text(action, deadline, now),
            until=deadline,
            note=note,
            reviewer_title=reviewer_title,
            reported=reported,
            reporter=reporter,
        )


async def notify_moderation_outcome(mailer: EmailService, outcome: ModerationOutcome) -> None:
    """E-mail the reported user and the reporter about a decision."""
    variables = {
        "decision": outcome.decision,
        "reason": outcome.note,
        "reported_user": outcome.reported.username if outcome.reported else "",
        "reviewer_title": outcome.reviewer_title,
        "action_taken_at": format_until(outcome.report.action_taken_at) if outcome.report.action_taken_at else "",
    }
    if outcome.reported is not None:
        result = await mailer.send(
            to=outcome.reported.email,
            subject=f"Moderation decision regarding your content on {constant.BRAND_NAME}",
            template="moderation_decision_reported",
            variables=variables,
        )
        if not result.ok:
            logger.warning(f"Moderation e-mail to reported user failed: {result.error or result.info}")
    if outcome.reporter is not None:
        result = await mailer.send(
            to=outcome.reporter.email,
            subject=f"Update on your report to {constant.BRAND_NAME} moderation",
            template="moderation_decision_reporter",
            variables=dict(variables, reporter=outcome.reporter.username),
        )
        if not result.ok:
            logger.warning(f"Moderation e-mail to reporter failed: {result.error or result.info}")
